"""Session state file persistence.

The whole registry lives in one YAML document that is read in full on every
operation and rewritten in full on every change.
"""
from __future__ import annotations

import logging
from pathlib import Path

import yaml

from cnd.core.exceptions import StoreCorruptError, StoreUnreadableError, StoreWriteError
from cnd.core.schemas import validate_payload_safe
from cnd.core.utils.io import read_yaml, write_yaml

from .models import STATE_VERSION, RegistryDocument

logger = logging.getLogger(__name__)


class StateStore:
    """Loads and saves the :class:`RegistryDocument` kept at ``path``."""

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> RegistryDocument:
        """Read the registry from disk.

        A missing (or empty) file is an empty registry. Anything else that
        prevents reading a valid document raises, so that a damaged file is
        never silently replaced by an empty one.

        Raises:
            StoreUnreadableError: The file exists but cannot be read.
            StoreCorruptError: The file is not a valid registry document.
        """
        if not self.path.exists():
            return RegistryDocument.empty()

        try:
            data = read_yaml(self.path, default=None, raise_on_error=True)
        except FileNotFoundError:
            # Removed between the existence check and the read.
            return RegistryDocument.empty()
        except OSError as exc:
            raise StoreUnreadableError(
                f"error reading the storage file {self.path}: {exc}", path=self.path
            ) from exc
        except (yaml.YAMLError, UnicodeDecodeError) as exc:
            raise StoreCorruptError(
                f"error unmarshalling the storage file {self.path}: {exc}", path=self.path
            ) from exc

        if data is None:
            return RegistryDocument.empty()

        errors = validate_payload_safe(data, "state")
        if errors:
            raise StoreCorruptError(
                f"invalid storage file {self.path}: {'; '.join(errors)}",
                path=self.path,
                context={"errors": errors},
            )
        return RegistryDocument.from_dict(data)

    def save(self, doc: RegistryDocument) -> None:
        """Replace the file with ``doc`` (temp file + rename).

        Raises:
            StoreWriteError: The document could not be written.
        """
        doc.version = STATE_VERSION
        try:
            write_yaml(self.path, doc.to_dict())
        except (OSError, yaml.YAMLError) as exc:
            raise StoreWriteError(f"error writing storage {self.path}: {exc}", path=self.path) from exc
        logger.debug("Saved %d session(s) to %s", len(doc.entries), self.path)


__all__ = ["StateStore"]
