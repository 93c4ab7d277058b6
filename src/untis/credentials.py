from __future__ import annotations

import os
from abc import ABC
from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass
class Credentials(ABC):
    host: str = field(default=None)  # e.g. borys.webuntis.com
    school: str = field(default=None)  # e.g. hubert-sternberg
    username: str = field(default=None)
    password: str = field(default=None)

    other_info: dict | None = None

    def validate(self) -> None:
        self.host = (self.host or "").strip()
        self.school = (self.school or "").strip()
        self.username = (self.username or "").strip()
        self.password = self.password or ""  # Spaces may be part of the password

        error = []
        if not self.host:
            error.append("host")
        if not self.school:
            error.append("school")
        if not self.username:
            error.append("username")
        if not self.password:
            error.append("password")

        if error:
            raise RuntimeError(f"Please verify and correct these attributes: {error}")


@dataclass
class PathCredentials(Credentials):
    filename: str | Path = field(default=Path.cwd().joinpath("credentials.yml"))

    def __post_init__(self):
        self.filename = Path(self.filename)

        cred_file: dict = yaml.safe_load(self.filename.read_text(encoding="utf8")) or {}
        self.host = cred_file.pop("host", None)
        self.school = cred_file.pop("school", None)
        self.username = cred_file.pop("username", None)
        self.password = cred_file.pop("password", None)

        self.other_info = cred_file


@dataclass
class EnvCredentials(Credentials):
    def __post_init__(self):
        self.host = os.getenv("UNTIS_HOST")
        self.school = os.getenv("UNTIS_SCHOOL")
        self.username = os.getenv("UNTIS_USERNAME")
        self.password = os.getenv("UNTIS_PASSWORD")


@dataclass
class AppCredentials(Credentials):
    def __init__(self, host=None, school=None, username=None, password=None):
        self.host = host
        self.school = school
        self.username = username
        self.password = password
        self.other_info = None
