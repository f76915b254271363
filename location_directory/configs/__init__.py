import yaml
import os
import re
from pathlib import Path
from dotenv import dotenv_values
from typing import Union


def get_ancestor_dir(start_path: Union[str, Path], steps: int) -> Path:
    if not isinstance(steps, int) or steps < 0:
        raise ValueError("Steps must be a non-negative integer.")

    path = Path(start_path).resolve()
    if path.is_file():
        path = path.parent

    for _ in range(steps):
        original_path = path
        path = path.parent
        if path == original_path:
            raise ValueError(
                f"Cannot go up {steps} levels from '{start_path}'. "
                "Traversal went beyond the filesystem root."
            )

    return path


def _load_yaml_file(filepath: str):
    """Loads a single YAML file."""
    if os.path.exists(filepath):
        try:
            with open(filepath, "r") as f:
                return yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            print(f"Error loading YAML file '{filepath}': {e}")
            return {}
    return {}


def _load_env(filepath: str = ".env"):
    """Loads environment variables from a .env file."""
    if os.path.exists(filepath):
        return dotenv_values(filepath)
    print(f"Warning: .env file not found at '{filepath}'")
    return {}


def _resolve_placeholders(data, original_data: dict):
    """
    Recursively replaces placeholder strings (e.g., '${key}')
    in a dictionary or list using top-level values of original_data.
    """
    if isinstance(data, dict):
        return {k: _resolve_placeholders(v, original_data) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_placeholders(item, original_data) for item in data]
    elif isinstance(data, str):
        for match in re.findall(r"\$\{(\w+)\}", data):
            replacement_value = original_data.get(match)
            data = data.replace(f"${{{match}}}", f"{replacement_value}")
        return data
    else:
        return data


def _sanitize_name(filename: str) -> str:
    """Sanitizes a filename to be a valid Python identifier."""
    name = filename.replace("-", "_")
    name = re.sub(r"[^a-zA-Z0-9_]", "", name)
    if name and name[0].isdigit():
        name = "_" + name
    return name


def load_file(filename, DIR):
    filepath = os.path.join(DIR, filename)
    loaded_data = None
    config_name = os.path.splitext(filename)[0]
    sanitized_config_name = _sanitize_name(config_name)
    if filename.endswith(".env"):
        loaded_data = _load_env(filepath)
        sanitized_config_name = (
            "env" if sanitized_config_name == "" else sanitized_config_name
        )
    elif filename.endswith((".yaml", ".yml")):
        loaded_data = _load_yaml_file(filepath)
    return loaded_data, sanitized_config_name


def handle_env_path(filedir, filename):
    loaded_data = None
    filepath = os.path.join(filedir, filename)
    if os.path.exists(filepath):
        loaded_data, _ = load_file(filename, filedir)
    elif os.environ.get("ENV_FILE_DIR"):
        loaded_data, _ = load_file(filename, os.environ.get("ENV_FILE_DIR"))
    else:
        loaded_data = dict((key, os.environ.get(key)) for key in ENV_KEYS)
    return loaded_data


def get_setting(section: str, key: str, env_key: str = None, default=None):
    """
    Reads configs[section][key], letting a non-empty env[env_key] win.
    """
    if env_key and env.get(env_key):
        return env.get(env_key)
    return (configs.get(section) or {}).get(key, default)


ENV_KEYS = [
    "APP_NAME",
    "DEBUG",
    "MONGO_URI",
    "MONGO_DB",
    "STORE_BACKEND",
    "LOG_LEVEL",
]

REPO_ROOT = get_ancestor_dir(__file__, 2)
CONFIGS_DIR = os.path.dirname(os.path.abspath(__file__))

__include__ = [(".env", REPO_ROOT), ("configs.yaml", CONFIGS_DIR)]

env = {}
configs = {}

for filename, filedir in __include__:
    if filename == ".env":
        env = handle_env_path(filedir, filename) or {}
        continue
    loaded_data, sanitized_config_name = load_file(filename, filedir)
    loaded_data = _resolve_placeholders(loaded_data, loaded_data)
    globals()[sanitized_config_name] = loaded_data
