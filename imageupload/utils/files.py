import mimetypes
from pathlib import Path
from typing import Optional, Union


class SelectedFile:
    """
    A file picked for upload: its name, size, declared content type and a way
    to get at the bytes. Backed either by a path on disk or by an in-memory
    buffer.
    """

    def __init__(
        self,
        name: str,
        size: int,
        type: str = "",
        path: Optional[Path] = None,
        data: Optional[bytes] = None,
    ):
        self.name = name
        self.size = size
        self.type = type
        self._path = path
        self._data = data

    @classmethod
    def from_path(cls, path: Union[str, Path], content_type: Optional[str] = None) -> "SelectedFile":
        p = Path(path)
        declared = content_type if content_type is not None else (mimetypes.guess_type(p.name)[0] or "")
        return cls(name=p.name, size=p.stat().st_size, type=declared, path=p)

    @classmethod
    def from_bytes(cls, name: str, data: bytes, content_type: str = "") -> "SelectedFile":
        return cls(name=name, size=len(data), type=content_type, data=data)

    def read_head(self, n: int = 32) -> bytes:
        if self._data is not None:
            return self._data[:n]
        if self._path is None:
            raise OSError(f"no content source for {self.name}")
        with self._path.open("rb") as fh:
            return fh.read(n)

    def read_bytes(self) -> bytes:
        if self._data is not None:
            return self._data
        if self._path is None:
            raise OSError(f"no content source for {self.name}")
        return self._path.read_bytes()

    def __repr__(self) -> str:
        return f"SelectedFile(name={self.name!r}, size={self.size}, type={self.type!r})"
