"""Transcript storage: the repository interface and a JSON file store."""

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List

from ..errors import PersistenceFailure
from ..models.transcript import Transcript

logger = logging.getLogger(__name__)


class TranscriptRepository(ABC):
    """CRUD operations on finished transcripts."""

    @abstractmethod
    def fetch_recent(self, limit: int = 10) -> List[Transcript]:
        """Return up to ``limit`` transcripts, newest first."""
        pass

    @abstractmethod
    def save(self, transcript: Transcript) -> None:
        pass

    @abstractmethod
    def update(self, transcript: Transcript) -> None:
        """Replace the transcript with the same id, or save it if unknown."""
        pass

    @abstractmethod
    def delete(self, transcript: Transcript) -> None:
        """Remove the transcript with the same id. Unknown ids are ignored."""
        pass


class FileTranscriptRepository(TranscriptRepository):
    """Keeps all transcripts in a single JSON file."""

    def __init__(self, data_dir: str = "./data", filename: str = "transcripts.json"):
        """Initialize file repository.

        Args:
            data_dir: Directory holding the transcripts file
            filename: Name of the JSON file
        """
        self.data_dir = Path(data_dir)
        self.storage_path = self.data_dir / filename
        logger.info(f"FileTranscriptRepository initialized with storage: {self.storage_path}")

    def fetch_recent(self, limit: int = 10) -> List[Transcript]:
        transcripts = self._load_all("fetch")
        transcripts.sort(key=lambda t: t.created_at, reverse=True)
        return transcripts[:limit]

    def save(self, transcript: Transcript) -> None:
        transcripts = self._load_all("save")
        for index, existing in enumerate(transcripts):
            if existing.id == transcript.id:
                transcripts[index] = transcript
                break
        else:
            transcripts.append(transcript)
        self._save_all(transcripts, "save")
        logger.info(f"Transcript saved: {transcript.id}")

    def update(self, transcript: Transcript) -> None:
        transcripts = self._load_all("update")
        for index, existing in enumerate(transcripts):
            if existing.id == transcript.id:
                transcripts[index] = transcript
                self._save_all(transcripts, "update")
                logger.info(f"Transcript updated: {transcript.id}")
                return

        logger.debug(f"Transcript {transcript.id} not stored yet, saving instead")
        self.save(transcript)

    def delete(self, transcript: Transcript) -> None:
        transcripts = self._load_all("delete")
        remaining = [t for t in transcripts if t.id != transcript.id]
        if len(remaining) == len(transcripts):
            logger.debug(f"Transcript {transcript.id} not found, nothing to delete")
            return
        self._save_all(remaining, "delete")
        logger.info(f"Transcript deleted: {transcript.id}")

    def _load_all(self, operation: str) -> List[Transcript]:
        if not self.storage_path.exists():
            return []

        try:
            with open(self.storage_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return [Transcript.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError) as e:
            logger.error(f"Error loading transcripts from {self.storage_path}: {e}")
            raise PersistenceFailure(f"Could not read transcripts: {e}", operation) from e

    def _save_all(self, transcripts: List[Transcript], operation: str) -> None:
        try:
            self.data_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.data_dir, prefix=".transcripts-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump([t.to_dict() for t in transcripts], f, indent=2, ensure_ascii=False)
                os.replace(tmp_path, self.storage_path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Error writing transcripts to {self.storage_path}: {e}")
            raise PersistenceFailure(f"Could not write transcripts: {e}", operation) from e
