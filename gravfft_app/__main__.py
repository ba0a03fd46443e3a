from __future__ import annotations

import sys

from gravfft_app.adapters.registry import list_engines


def main() -> None:
    """
    CLI entry.

    Kept minimal: option parsing belongs to the calling toolkit. Print the engines
    and a usage hint.
    """
    lines = ["gravfft-app: spectral gravity, geoid and admittance engines", "Engines:"]
    lines += [f"  - {name}" for name in list_engines()]
    lines.append("Use gravfft_app.orchestration.session (run_forward, run_admittance, run_theoretical).")
    sys.stdout.write("\n".join(lines) + "\n")


if __name__ == "__main__":
    main()
