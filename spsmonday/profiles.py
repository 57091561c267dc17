"""
Named connection profiles.

Each profile lives in its own directory under ``<config_dir>/profiles`` and
holds two files: ``credential.bin`` (the API token, AES-GCM encrypted) and
``profile.json`` (name, creation timestamp, base URL).

The encryption key is a random per-store key file readable only by its
owner, and the ``user@host`` identity is bound in as associated data, so a
credential file only decrypts for the account and machine that wrote it.
"""

import getpass
import logging
import os
import platform
import re
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Union

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from pydantic import ValidationError

from .config import get_settings
from .errors import ConfigurationError
from .models.schemas import Profile, ProfileMetadata

logger = logging.getLogger(__name__)

PROFILE_NAME_RE = re.compile(r"[A-Za-z0-9_.-]+")
PROFILES_DIR = "profiles"
CREDENTIAL_FILE = "credential.bin"
METADATA_FILE = "profile.json"
KEY_FILE = ".key"
NONCE_SIZE = 12


def machine_identity() -> bytes:
    """``user@host`` for the current process, used as associated data."""
    try:
        user = getpass.getuser()
    except (KeyError, OSError):
        user = str(Path.home())
    return f"{user}@{platform.node()}".encode("utf-8")


def _write_private(path: Path, data: bytes) -> None:
    fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
    with os.fdopen(fd, "wb") as handle:
        handle.write(data)
    os.chmod(path, 0o600)


class CredentialCipher:
    """AES-GCM encryption of tokens with a key file and identity binding."""

    def __init__(self, key_path: Path, identity: Optional[bytes] = None):
        self.key_path = Path(key_path)
        self.identity = identity if identity is not None else machine_identity()

    def _load_key(self, create: bool) -> bytes:
        if self.key_path.exists():
            key = self.key_path.read_bytes()
            if len(key) != 32:
                raise ConfigurationError(f"Key file {self.key_path} is corrupt")
            return key
        if not create:
            raise ConfigurationError(f"Key file {self.key_path} is missing; credentials cannot be decrypted")
        self.key_path.parent.mkdir(parents=True, exist_ok=True)
        key = AESGCM.generate_key(bit_length=256)
        _write_private(self.key_path, key)
        logger.info(f"Created credential key file {self.key_path}")
        return key

    def encrypt(self, token: str) -> bytes:
        nonce = os.urandom(NONCE_SIZE)
        ciphertext = AESGCM(self._load_key(create=True)).encrypt(nonce, token.encode("utf-8"), self.identity)
        return nonce + ciphertext

    def decrypt(self, blob: bytes) -> str:
        if len(blob) <= NONCE_SIZE:
            raise ConfigurationError("Credential file is truncated")
        nonce, ciphertext = blob[:NONCE_SIZE], blob[NONCE_SIZE:]
        try:
            plaintext = AESGCM(self._load_key(create=False)).decrypt(nonce, ciphertext, self.identity)
        except InvalidTag:
            raise ConfigurationError(
                "Credential cannot be decrypted; it was written by another user or machine, or the key changed"
            ) from None
        return plaintext.decode("utf-8")


class ProfileStore:
    """
    Filesystem store for named profiles.

    Args:
        config_dir: Root directory (defaults to ``MONDAY_CONFIG_DIR``)
        identity: Override for the ``user@host`` binding
    """

    def __init__(self, config_dir: Optional[Union[str, Path]] = None, identity: Optional[bytes] = None):
        self.config_dir = Path(config_dir) if config_dir else Path(get_settings().MONDAY_CONFIG_DIR)
        self.cipher = CredentialCipher(self.config_dir / KEY_FILE, identity=identity)

    @staticmethod
    def validate_name(name: str) -> str:
        if not name or not PROFILE_NAME_RE.fullmatch(name) or not name.strip("."):
            raise ConfigurationError(f"Invalid profile name: {name!r}")
        return name

    def profile_dir(self, name: str) -> Path:
        return self.config_dir / PROFILES_DIR / self.validate_name(name)

    def exists(self, name: str) -> bool:
        try:
            return (self.profile_dir(name) / METADATA_FILE).is_file()
        except ConfigurationError:
            return False

    def save(
        self,
        name: str,
        token: str,
        base_url: Optional[str] = None,
        overwrite: bool = False,
    ) -> ProfileMetadata:
        """
        Persist a profile: encrypted token plus metadata.

        Args:
            name: Profile name (letters, digits, ``_``, ``.``, ``-``)
            token: monday.com API token
            base_url: GraphQL endpoint (defaults to ``MONDAY_API_URL``)
            overwrite: Replace an existing profile of the same name

        Returns:
            The stored metadata

        Raises:
            ConfigurationError: Invalid name, empty token, or profile exists
        """
        directory = self.profile_dir(name)
        if not token or not token.strip():
            raise ConfigurationError(f"Profile '{name}': token must not be empty")
        if (directory / METADATA_FILE).exists() and not overwrite:
            raise ConfigurationError(f"Profile '{name}' already exists; pass overwrite=True to replace it")

        metadata = ProfileMetadata(
            name=name,
            created=datetime.now(timezone.utc),
            base_url=base_url or get_settings().MONDAY_API_URL,
        )
        directory.mkdir(parents=True, exist_ok=True)
        _write_private(directory / CREDENTIAL_FILE, self.cipher.encrypt(token.strip()))
        (directory / METADATA_FILE).write_text(metadata.model_dump_json(indent=2), encoding="utf-8")

        logger.info(f"Saved profile '{name}' ({metadata.base_url})")
        return metadata

    def _read_metadata(self, name: str, path: Path) -> ProfileMetadata:
        try:
            return ProfileMetadata.model_validate_json(path.read_text(encoding="utf-8"))
        except (ValidationError, ValueError) as e:
            raise ConfigurationError(f"Profile '{name}': metadata file {path} is invalid: {e}") from e

    def load(self, name: str) -> Profile:
        """
        Load a profile and decrypt its token.

        Raises:
            ConfigurationError: Profile, metadata or credential missing, or
                the credential cannot be decrypted
        """
        directory = self.profile_dir(name)
        metadata_path = directory / METADATA_FILE
        credential_path = directory / CREDENTIAL_FILE

        if not metadata_path.is_file():
            raise ConfigurationError(f"Profile '{name}' not found in {self.config_dir}")
        if not credential_path.is_file():
            raise ConfigurationError(f"Profile '{name}': credential file {credential_path} is missing")

        metadata = self._read_metadata(name, metadata_path)
        try:
            token = self.cipher.decrypt(credential_path.read_bytes())
        except ConfigurationError as e:
            raise ConfigurationError(f"Profile '{name}': {e}") from e

        logger.debug(f"Loaded profile '{name}'")
        return Profile(metadata=metadata, token=token)

    def list(self) -> List[ProfileMetadata]:
        """Metadata of every stored profile, sorted by name."""
        root = self.config_dir / PROFILES_DIR
        if not root.is_dir():
            return []
        profiles = []
        for entry in sorted(root.iterdir()):
            metadata_path = entry / METADATA_FILE
            if not metadata_path.is_file():
                continue
            try:
                profiles.append(self._read_metadata(entry.name, metadata_path))
            except ConfigurationError as e:
                logger.warning(f"Skipping unreadable profile: {e}")
        return profiles

    def remove(self, name: str) -> None:
        directory = self.profile_dir(name)
        if not directory.exists():
            raise ConfigurationError(f"Profile '{name}' not found in {self.config_dir}")
        shutil.rmtree(directory)
        logger.info(f"Removed profile '{name}'")
