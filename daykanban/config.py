# daykanban — configuration
# Override defaults via config.yaml (or DAYKANBAN_CONFIG) and env vars.

import logging
import os
import yaml
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional

from .schema import COLUMN_IDS
from .validators import MAX_DESCRIPTION_LENGTH

logger = logging.getLogger(__name__)

CONFIG_PATH = Path(__file__).parent.parent / "config.yaml"


@dataclass
class Config:
    """Runtime configuration for the engines and the API server."""

    # Board
    done_column_id: str = COLUMN_IDS["DONE"]
    in_progress_column_id: str = COLUMN_IDS["DOING"]

    # Display
    date_format: str = "%m/%d/%Y"
    time_format: str = "12h"               # "12h" | "24h"
    max_description_length: int = MAX_DESCRIPTION_LENGTH

    # API server
    server_host: str = "127.0.0.1"
    server_port: int = 3000
    log_level: str = "INFO"

    def apply_env(self):
        """Host/port from the environment win over the file."""
        host = os.environ.get("DAYKANBAN_HOST")
        if host:
            self.server_host = host
        port = os.environ.get("DAYKANBAN_PORT")
        if port:
            try:
                self.server_port = int(port)
            except ValueError:
                logger.warning(f"Ignoring non-numeric DAYKANBAN_PORT={port!r}")
        if self.time_format not in ("12h", "24h"):
            logger.warning(f"Unknown time_format {self.time_format!r}, using 12h")
            self.time_format = "12h"

    def public_dict(self) -> dict:
        data = asdict(self)
        data.pop("server_host")
        data.pop("server_port")
        data.pop("log_level")
        return data

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """Load config from YAML file, falling back to defaults."""
        cfg_path = Path(path or os.environ.get("DAYKANBAN_CONFIG") or CONFIG_PATH)
        if cfg_path.exists():
            try:
                with open(cfg_path, "r") as f:
                    data = yaml.safe_load(f) or {}
                cfg = cls(**{k: v for k, v in data.items() if hasattr(cls, k)})
            except (OSError, yaml.YAMLError, TypeError, AttributeError) as e:
                logger.warning(f"Could not read {cfg_path}: {e}; using defaults")
                cfg = cls()
        else:
            cfg = cls()
        cfg.apply_env()
        return cfg
