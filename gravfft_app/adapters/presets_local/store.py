from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import List

from gravfft_app.domain.models import ModelConfig

logger = logging.getLogger(__name__)


def _slugify(name: str) -> str:
    safe = "".join(c if c.isalnum() or c in ("-", "_") else "-" for c in name.strip())
    safe = "-".join(filter(None, safe.split("-")))
    return safe.lower() or "preset"


class LocalPresetStore:
    """JSON presets of model parameters, one ``<base_dir>/<slug>.json`` per name.

    Each file records the parameter-bundle version under ``schema_version``.
    """

    def __init__(self, base_dir: Path | None = None) -> None:
        self.base_dir = Path(base_dir or Path.cwd() / "presets").resolve()
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def list(self) -> List[str]:
        return sorted(p.stem for p in self.base_dir.glob("*.json"))

    def path_for(self, name: str) -> Path:
        return self.base_dir / f"{_slugify(name)}.json"

    def save(self, name: str, cfg: ModelConfig) -> Path:
        path = self.path_for(name)
        data = cfg.model_dump(mode="json")
        data["schema_version"] = cfg.version
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        logger.info("Saved preset %r to %s", name, path)
        return path

    def load(self, name: str) -> ModelConfig:
        path = self.path_for(name)
        if not path.exists():
            raise KeyError(f"No preset named '{name}'. Available: {', '.join(self.list()) or 'none'}")
        data = json.loads(path.read_text(encoding="utf-8"))
        version = data.pop("schema_version", None)
        if version is not None and version != data.get("version"):
            logger.warning("Preset %r written with schema %s; loading as %s", name, version, data.get("version"))
        return ModelConfig.model_validate(data)

    def remove(self, name: str) -> None:
        path = self.path_for(name)
        if path.exists():
            path.unlink()
