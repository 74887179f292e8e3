"""Output directory layout; the one fatal setup step of a run."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import AppConfig, default_base_dir


class FatalSetupError(RuntimeError):
    """A required output directory could not be created."""


@dataclass(frozen=True)
class Workspace:
    base: Path
    logs: Path
    reports: Path
    data: Path

    @classmethod
    def from_config(cls, cfg: AppConfig, base_dir: Path | None = None) -> "Workspace":
        base = base_dir or (Path(cfg.paths.base_dir).expanduser() if cfg.paths.base_dir else default_base_dir())
        return cls(
            base=base,
            logs=base / cfg.paths.logs_dir,
            reports=base / cfg.paths.reports_dir,
            data=base / cfg.paths.data_dir,
        )

    def ensure(self) -> "Workspace":
        for path in (self.logs, self.reports, self.data):
            try:
                path.mkdir(parents=True, exist_ok=True)
            except OSError as exc:
                raise FatalSetupError(f"cannot create {path}: {exc}") from exc
            if not path.is_dir():
                raise FatalSetupError(f"{path} exists and is not a directory")
        return self
