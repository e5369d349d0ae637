"""Abstract file system contract expected by the content-management host."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import BinaryIO, List, Optional, Union


class FileSystem(ABC):
    """Hierarchical file system operations the host calls."""

    @abstractmethod
    def add_file(self, path: str, stream: Union[bytes, BinaryIO], overwrite: bool = True) -> None:
        """
        Store a file.

        Args:
            path: Virtual path (e.g., "/docs/report.pdf")
            stream: File contents as bytes or a readable binary stream
            overwrite: Replace an existing file under the same path
        """
        pass

    @abstractmethod
    def delete_file(self, path: str) -> None:
        """
        Delete a single file.

        Args:
            path: Virtual path
        """
        pass

    @abstractmethod
    def delete_directory(self, path: str, recursive: bool = False) -> None:
        """
        Delete a directory and everything below it.

        Args:
            path: Virtual directory path
            recursive: Accepted for compatibility; has no effect
        """
        pass

    @abstractmethod
    def file_exists(self, path: str) -> bool:
        """
        Check if a file exists.

        Args:
            path: Virtual path

        Returns:
            True if file exists, False otherwise
        """
        pass

    @abstractmethod
    def directory_exists(self, path: str) -> bool:
        """
        Check if anything is stored below a directory.

        Args:
            path: Virtual directory path

        Returns:
            True if at least one file lives under the directory
        """
        pass

    @abstractmethod
    def get_files(self, path: str, filter: Optional[str] = "*.*") -> List[str]:
        """
        List files directly inside a directory.

        Args:
            path: Virtual directory path
            filter: Name/extension glob (e.g., "*.*", "report*.csv")

        Returns:
            Virtual paths of matching files
        """
        pass

    @abstractmethod
    def get_directories(self, path: Optional[str]) -> List[str]:
        """
        List directories directly inside a directory.

        Args:
            path: Virtual directory path; empty means the root

        Returns:
            Common prefixes of the subdirectories, as object keys ending with
            the delimiter (e.g., "media/docs/sub/"); they resolve back to the
            same directory
        """
        pass

    @abstractmethod
    def get_last_modified(self, path: str) -> datetime:
        """
        Get the modification time of a file.

        Returns:
            Modification time, or the minimum timestamp if the file is absent
        """
        pass

    @abstractmethod
    def get_created(self, path: str) -> datetime:
        """Get the creation time of a file."""
        pass

    @abstractmethod
    def get_url(self, path: str) -> str:
        """Get the public URL of a file."""
        pass

    @abstractmethod
    def get_relative_path(self, full_path_or_url: str) -> str:
        """Get the relative path from a public URL or full path."""
        pass

    @abstractmethod
    def get_full_path(self, path: str) -> str:
        """Get the full path the host uses for a virtual path."""
        pass

    @abstractmethod
    def open_file(self, path: str) -> BinaryIO:
        """
        Open a file for reading.

        Returns:
            Seekable binary stream positioned at the start

        Raises:
            ObjectNotFoundError: If the file does not exist
        """
        pass
