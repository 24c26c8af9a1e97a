"""Top-level PE image parsing."""

from __future__ import annotations

import os
from dataclasses import dataclass

from peinspect.errors import CorruptedFileError, NotPeFileError, PeIoError
from peinspect.structures import (
    PE32_PLUS_MAGIC,
    CoffHeader,
    DosHeader,
    OptionalHeader,
)

PE_SIGNATURE = b"PE\x00\x00"


@dataclass(frozen=True)
class PeFile:
    """A parsed PE image with its raw bytes and headers."""

    data: bytes
    dos_header: DosHeader
    coff_header: CoffHeader
    optional_header: OptionalHeader

    @classmethod
    def from_bytes(cls, data: bytes) -> PeFile:
        """Parse the headers of a PE image held in memory."""
        data = bytes(data)
        dos_header = DosHeader.parse(data)

        pe_offset = dos_header.e_lfanew
        if pe_offset < 0 or pe_offset + 4 > len(data):
            raise CorruptedFileError("Invalid PE offset")

        if data[pe_offset : pe_offset + 4] != PE_SIGNATURE:
            raise NotPeFileError()

        coff_start = pe_offset + 4
        coff_header = CoffHeader.parse(data[coff_start:])

        optional_start = coff_start + CoffHeader.SIZE
        if optional_start + 2 > len(data):
            raise CorruptedFileError("Cannot read Option Header magic")

        magic = int.from_bytes(data[optional_start : optional_start + 2], "little")
        optional_header = OptionalHeader.parse(
            data[optional_start:], magic == PE32_PLUS_MAGIC
        )

        return cls(data, dos_header, coff_header, optional_header)

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> PeFile:
        """Read and parse the PE image stored at ``path``."""
        try:
            with open(path, "rb") as handle:
                data = handle.read()
        except OSError as exc:
            raise PeIoError(str(exc)) from exc
        return cls.from_bytes(data)