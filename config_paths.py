import json
import os

HOME = os.path.expanduser("~")
XDG_CONFIG_HOME = os.environ.get("XDG_CONFIG_HOME")
CONFIG_HOME = XDG_CONFIG_HOME if XDG_CONFIG_HOME else os.path.join(HOME, ".config")
CONFIG_DIR = os.path.join(CONFIG_HOME, "rowdesk")
CONFIG_JSON = os.path.join(CONFIG_DIR, "config.json")

# default settings
LOG_LEVEL_DEFAULT = "WARNING"
LOG_FILE_DEFAULT = None
EXPORT_DIR_DEFAULT = None
SEED_DEMO_DATA_DEFAULT = True

_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}


def load_config():
    cfg = {
        "LOG_LEVEL": LOG_LEVEL_DEFAULT,
        "LOG_FILE": LOG_FILE_DEFAULT,
        "EXPORT_DIR": EXPORT_DIR_DEFAULT,
        "SEED_DEMO_DATA": SEED_DEMO_DATA_DEFAULT,
    }

    if not os.path.exists(CONFIG_JSON):
        return cfg

    try:
        with open(CONFIG_JSON, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError):
        return cfg

    if not isinstance(data, dict):
        return cfg

    level = data.get("log_level")
    if isinstance(level, str) and level.strip().upper() in _LOG_LEVELS:
        cfg["LOG_LEVEL"] = level.strip().upper()

    log_file = data.get("log_file")
    if isinstance(log_file, str) and log_file.strip():
        cfg["LOG_FILE"] = os.path.expanduser(log_file.strip())

    export_dir = data.get("export_dir")
    if isinstance(export_dir, str) and export_dir.strip():
        cfg["EXPORT_DIR"] = os.path.expanduser(export_dir.strip())

    seed = data.get("seed_demo_data")
    if isinstance(seed, bool):
        cfg["SEED_DEMO_DATA"] = seed

    return cfg
