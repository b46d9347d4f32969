"""
Data source abstractions for loading and saving training plan files.
Plans are read as raw text so the grid codec sees every cell verbatim.
"""

import codecs
import os
import shutil
from abc import ABC, abstractmethod
from pathlib import Path
from typing import List, Optional, Union

import chardet
from loguru import logger

from plan_grid import RawGrid, parse_raw_csv, raw_to_csv

# Bytes sampled for encoding detection
DETECTION_SAMPLE_BYTES = 50000


class PlanSource(ABC):
    """Abstract base class for anything that supplies plan CSV text."""

    @abstractmethod
    def load_text(self) -> str:
        """
        Load the full plan text.

        Returns:
            CSV text with any byte order mark removed
        """
        pass

    def load_grid(self) -> RawGrid:
        """Load the plan and parse it into a raw grid."""
        return parse_raw_csv(self.load_text())


class PlanFileSource(PlanSource):
    """Loads and saves a plan CSV file on the local disk."""

    FALLBACK_ENCODINGS = ['cp1252', 'iso-8859-1']

    def __init__(self, file_path: Union[str, Path]):
        """
        Initialize the source for one plan file.

        Args:
            file_path: Path to the plan CSV file
        """
        self.file_path = Path(file_path)
        self.encoding: Optional[str] = None

    def _candidate_encodings(self, raw_data: bytes) -> List[str]:
        encodings_to_try = ['utf-8-sig' if raw_data.startswith(codecs.BOM_UTF8) else 'utf-8']

        detected = chardet.detect(raw_data[:DETECTION_SAMPLE_BYTES])
        detected_encoding = (detected.get('encoding') or '').lower()
        if detected_encoding and detected_encoding not in encodings_to_try and detected_encoding != 'ascii':
            encodings_to_try.append(detected_encoding)

        for encoding in self.FALLBACK_ENCODINGS:
            if encoding not in encodings_to_try:
                encodings_to_try.append(encoding)
        return encodings_to_try

    def load_text(self) -> str:
        """
        Read the plan file, detecting its encoding.

        Returns:
            Decoded file content

        Raises:
            FileNotFoundError: If the file doesn't exist
            ValueError: If no candidate encoding can decode the file
        """
        if not self.file_path.exists():
            raise FileNotFoundError(f"Plan file not found: {self.file_path}")

        raw_data = self.file_path.read_bytes()
        last_error = None

        for encoding in self._candidate_encodings(raw_data):
            try:
                text = raw_data.decode(encoding)
            except (UnicodeDecodeError, LookupError) as e:
                last_error = e
                continue
            self.encoding = encoding
            logger.info("Loaded plan {} ({} bytes, {} encoding)", self.file_path, len(raw_data), encoding)
            return text

        raise ValueError(f"Failed to decode plan file with any encoding. Last error: {last_error}")

    def _encode(self, text: str) -> bytes:
        encoding = self.encoding or 'utf-8'
        try:
            return text.encode(encoding)
        except UnicodeEncodeError as e:
            # Text typed since loading may not fit a legacy code page
            logger.warning("Plan text cannot be written as {} ({}); saving as utf-8", encoding, e.reason)
            self.encoding = 'utf-8'
            return text.encode('utf-8')

    def save_text(self, text: str, backup: bool = False) -> bool:
        """
        Write plan text back to the file.

        The text is encoded before the file is touched and written through a
        temporary file, so a failed save leaves the previous plan in place.

        Args:
            text: Serialized plan CSV
            backup: Copy the current file to ``<name>.bak`` before writing

        Returns:
            True once the file has been written

        Raises:
            OSError: If the file cannot be written
        """
        data = self._encode(text)

        if backup and self.file_path.exists():
            backup_path = self.backup_path()
            shutil.copy2(self.file_path, backup_path)
            logger.info("Backed up plan to {}", backup_path)

        temp_path = self.file_path.with_name(self.file_path.name + '.tmp')
        try:
            temp_path.write_bytes(data)
            os.replace(temp_path, self.file_path)
        except OSError:
            temp_path.unlink(missing_ok=True)
            raise

        logger.info("Saved plan {} ({} bytes, {} encoding)", self.file_path, len(data), self.encoding or 'utf-8')
        return True

    def save_grid(self, grid: RawGrid, backup: bool = False) -> bool:
        """Serialize a grid and write it to the file."""
        return self.save_text(raw_to_csv(grid), backup=backup)

    def backup_path(self) -> Path:
        return self.file_path.with_name(self.file_path.name + '.bak')
