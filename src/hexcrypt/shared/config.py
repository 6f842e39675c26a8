from logging import CRITICAL, DEBUG, ERROR, INFO, WARNING
from os import PathLike
from pathlib import Path
from tomllib import load

from pydantic import BaseModel, field_validator

DEFAULT_CONFIG_PATH = Path("config.toml")


class Logging(BaseModel):
    level: int = INFO

    @field_validator("level", mode="before")
    @classmethod
    def convert_log_level(cls, value):
        if isinstance(value, int):
            return value
        log_levels = {
            "DEBUG": DEBUG,
            "INFO": INFO,
            "WARNING": WARNING,
            "ERROR": ERROR,
            "CRITICAL": CRITICAL,
        }
        return log_levels.get(str(value).upper(), INFO)


class Paths(BaseModel):
    logs: str | None = None


class AltCipher(BaseModel):
    passphrase: str = "emfladosxmvkzmtmxhdj"
    salt: str = "hexcrypt-alt-cipher"
    iterations: int = 100_000
    charset: str = "utf-8"


class Config(BaseModel):
    logging: Logging = Logging()
    paths: Paths = Paths()
    alt_cipher: AltCipher = AltCipher()


def load_config(
    shared_config_file: PathLike = DEFAULT_CONFIG_PATH,
    specific_config_file: PathLike | None = None,
) -> Config:
    """Load and merge configurations from TOML files.

    A missing shared file leaves every section at its default.
    """
    config_data = {}

    shared_path = Path(shared_config_file)
    if shared_path.exists():
        with shared_path.open("rb") as f:
            config_data = load(f)

    # Sections in the specific file replace whole sections of the shared one
    if specific_config_file:
        with Path(specific_config_file).open("rb") as f:
            specific_data = load(f)
            config_data.update(specific_data)

    return Config(**config_data)
