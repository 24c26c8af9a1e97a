"""PE header structures: DOS header, COFF file header and optional header."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field

from peinspect.errors import InvalidHeaderError, NotPeFileError
from peinspect.reader import BinaryReader

DOS_MAGIC = 0x5A4D
PE32_PLUS_MAGIC = 0x20B

_DOS_LAYOUT = struct.Struct("<30Hi")
_COFF_LAYOUT = struct.Struct("<HHIIIHH")

IMAGE_FILE_RELOCS_STRIPPED = 0x0001
IMAGE_FILE_EXECUTABLE_IMAGE = 0x0002
IMAGE_FILE_LINE_NUMS_STRIPPED = 0x0004
IMAGE_FILE_LOCAL_SYMS_STRIPPED = 0x0008
IMAGE_FILE_AGGRESSIVE_WS_TRIM = 0x0010
IMAGE_FILE_LARGE_ADDRESS_AWARE = 0x0020
IMAGE_FILE_BYTES_REVERSED_LO = 0x0080
IMAGE_FILE_32BIT_MACHINE = 0x0100
IMAGE_FILE_DEBUG_STRIPPED = 0x0200
IMAGE_FILE_REMOVABLE_RUN_FROM_SWAP = 0x0400
IMAGE_FILE_NET_RUN_FROM_SWAP = 0x0800
IMAGE_FILE_SYSTEM = 0x1000
IMAGE_FILE_DLL = 0x2000
IMAGE_FILE_UP_SYSTEM_ONLY = 0x4000
IMAGE_FILE_BYTES_REVERSED_HI = 0x8000

_FILE_CHARACTERISTICS = (
    (IMAGE_FILE_RELOCS_STRIPPED, "RELOCS_STRIPPED", "Relocation info stripped from file"),
    (
        IMAGE_FILE_EXECUTABLE_IMAGE,
        "EXECUTABLE_IMAGE",
        "File is executable (i.e. no unresolved external references)",
    ),
    (IMAGE_FILE_LINE_NUMS_STRIPPED, "LINE_NUMS_STRIPPED", "Line numbers stripped from file"),
    (IMAGE_FILE_LOCAL_SYMS_STRIPPED, "LOCAL_SYMS_STRIPPED", "Local symbols stripped from file"),
    (IMAGE_FILE_AGGRESSIVE_WS_TRIM, "AGGRESSIVE_WS_TRIM", "Aggressively trim working set"),
    (IMAGE_FILE_LARGE_ADDRESS_AWARE, "LARGE_ADDRESS_AWARE", "App can handle >2GB addresses"),
    (
        IMAGE_FILE_BYTES_REVERSED_LO,
        "BYTES_REVERSED_LO",
        "Bytes of machine word are reversed (low)",
    ),
    (IMAGE_FILE_32BIT_MACHINE, "32BIT_MACHINE", "32-bit word machine"),
    (
        IMAGE_FILE_DEBUG_STRIPPED,
        "DEBUG_STRIPPED",
        "Debugging info stripped from file in .DBG file",
    ),
    (
        IMAGE_FILE_REMOVABLE_RUN_FROM_SWAP,
        "REMOVABLE_RUN_FROM_SWAP",
        "If Image is on removable media, copy and run from the swap file",
    ),
    (
        IMAGE_FILE_NET_RUN_FROM_SWAP,
        "NET_RUN_FROM_SWAP",
        "If Image is on Net, copy and run from the swap file",
    ),
    (IMAGE_FILE_SYSTEM, "SYSTEM", "System File"),
    (IMAGE_FILE_DLL, "DLL", "Dynamic Link Library (DLL)"),
    (IMAGE_FILE_UP_SYSTEM_ONLY, "UP_SYSTEM_ONLY", "File should only be run on a UP machine"),
    (
        IMAGE_FILE_BYTES_REVERSED_HI,
        "BYTES_REVERSED_HI",
        "Bytes of machine word are reversed (high)",
    ),
)

_MACHINE_TYPES = {
    0x0: "Unknown (Any)",
    0x184: "Alpha AXP, 32-bit address space",
    0x284: "Alpha 64, 64-bit address space",
    0x1D3: "Matsushita AM33",
    0x8664: "x64",
    0x1C0: "ARM little endian",
    0xAA64: "ARM64 little endian",
    0x1C4: "ARM Thumb-2 little endian",
    0xEBC: "EFI byte code",
    0x14C: "Intel 386 or later processors and compatible processors",
    0x200: "Intel Itanium processor family",
    0x6232: "LoongArch 32-bit processor family",
    0x6264: "LoongArch 64-bit processor family",
    0x9041: "Mitsubishi M32R little endian",
    0x266: "MIPS16",
    0x366: "MIPS with FPU",
    0x466: "MIPS16 with FPU",
    0x1F0: "Power PC little endian",
    0x1F1: "Power PC with floating point support",
    0x160: "MIPS I compatible 32-bit big endian",
    0x162: "MIPS I compatible 32-bit little endian",
    0x166: "MIPS III compatible 64-bit little endian",
    0x168: "MIPS IV compatible 64-bit little endian",
    0x5032: "RISC-V 32-bit address space",
    0x5064: "RISC-V 64-bit address space",
    0x5128: "RISC-V 128-bit address space",
    0x1A2: "Hitachi SH3",
    0x1A3: "Hitachi SH3 DSP",
    0x1A6: "Hitachi SH4",
    0x1A8: "Hitachi SH5",
    0x1C2: "Thumb",
    0x169: "MIPS little-endian WCE v2",
}

_DLL_CHARACTERISTICS = (
    (0x0020, "DLLCHARACTERISTICS_HIGH_ENTROPY_VA", "High Entropy VA"),
    (0x0040, "DLLCHARACTERISTICS_DYNAMIC_BASE", "Dynamic Base"),
    (0x0080, "DLLCHARACTERISTICS_FORCE_INTEGRITY", "Force Integrity"),
    (0x0100, "DLLCHARACTERISTICS_NX_COMPAT", "NX Compatible"),
    (0x0200, "DLLCHARACTERISTICS_NO_ISOLATION", "No Isolation"),
    (0x0400, "DLLCHARACTERISTICS_NO_SEH", "No SEH"),
    (0x0800, "DLLCHARACTERISTICS_NO_BIND", "No Bind"),
    (0x1000, "DLLCHARACTERISTICS_APPCONTAINER", "AppContainer"),
    (0x0200, "DLLCHARACTERISTICS_WDM_DRIVER", "WDM Driver"),
    (0x4000, "DLLCHARACTERISTICS_GUARD_CF", "Guard CF"),
    (0x8000, "DLLCHARACTERISTICS_TERMINAL_SERVER_AWARE", "Terminal Server Aware"),
)

_SUBSYSTEMS = {
    0: "An Unknown Subsystem",
    1: "Device drivers and native Windows processes",
    2: "The Windows graphical user interface (GUI) subsystem",
    3: "The Windows character subsystem",
    5: "The OS/2 character subsystem",
    7: "The Posix character subsystem",
    8: "Native Win9x driver",
    9: "Windows CE",
    10: "An Extensible Firmware Interface (EFI) application",
    11: "An EFI driver with boot services",
    12: "An EFI driver with run-time services",
    13: "An EFI ROM image",
    14: "XBOX",
    16: "Windows boot application",
}

_DATA_DIRECTORY_NAMES = (
    "Export Directory",
    "Import Directory",
    "Resource Directory",
    "Exception Directory",
    "Security Directory",
    "Base Relocation Table",
    "Debug Directory",
    "Architecture Specific Data",
    "RVA of GP",
    "TLS Directory",
    "Load Configuration Directory",
    "Bound Import Directory in headers",
    "Import Address Table",
    "Delay Load Import Descriptors",
    "COM Runtime descriptor",
)


def _select_flags(value: int, table, human_readable: bool) -> list[str]:
    return [
        desc if human_readable else name
        for flag, name, desc in table
        if value & flag
    ]


@dataclass(frozen=True)
class DosHeader:
    """The IMAGE_DOS_HEADER at the start of every PE image."""

    SIZE = 64

    e_magic: int
    e_cblp: int
    e_cp: int
    e_crlc: int
    e_cparhdr: int
    e_minalloc: int
    e_maxalloc: int
    e_ss: int
    e_sp: int
    e_csum: int
    e_ip: int
    e_cs: int
    e_lfarlc: int
    e_ovno: int
    e_res: tuple[int, ...]
    e_oemid: int
    e_oeminfo: int
    e_res2: tuple[int, ...]
    e_lfanew: int

    @classmethod
    def parse(cls, data: bytes) -> DosHeader:
        """Parse the DOS header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise InvalidHeaderError("DOS header too small")
        values = _DOS_LAYOUT.unpack_from(data)
        if values[0] != DOS_MAGIC:
            raise NotPeFileError()
        return cls(
            *values[:14],
            e_res=tuple(values[14:18]),
            e_oemid=values[18],
            e_oeminfo=values[19],
            e_res2=tuple(values[20:30]),
            e_lfanew=values[30],
        )


@dataclass(frozen=True)
class CoffHeader:
    """The IMAGE_FILE_HEADER that follows the PE signature."""

    SIZE = 20

    machine: int
    number_of_sections: int
    time_date_stamp: int
    pointer_to_symbol_table: int
    number_of_symbols: int
    size_of_optional_header: int
    characteristics: int

    @classmethod
    def parse(cls, data: bytes) -> CoffHeader:
        """Parse the COFF file header from the start of ``data``."""
        if len(data) < cls.SIZE:
            raise InvalidHeaderError("COFF Header too small")
        return cls(*_COFF_LAYOUT.unpack_from(data))

    def machine_type(self) -> str:
        return _MACHINE_TYPES.get(self.machine, "Undocumented")

    def characteristics_list(self, human_readable: bool = True) -> list[str]:
        """Names or descriptions of the set characteristic flags, in bit order."""
        return _select_flags(self.characteristics, _FILE_CHARACTERISTICS, human_readable)

    def is_executable(self) -> bool:
        return bool(self.characteristics & IMAGE_FILE_EXECUTABLE_IMAGE)

    def is_dll(self) -> bool:
        return bool(self.characteristics & IMAGE_FILE_DLL)

    def is_system_file(self) -> bool:
        return bool(self.characteristics & IMAGE_FILE_SYSTEM)

    def file_type(self) -> str:
        if self.is_dll():
            return "Dynamic Link Library (DLL)"
        if self.is_executable():
            return "Executable (EXE)"
        if self.is_system_file():
            return "System File"
        return "Unknown"

    def is_large_address_aware(self) -> bool:
        return bool(self.characteristics & IMAGE_FILE_LARGE_ADDRESS_AWARE)

    def is_32bit_machine(self) -> bool:
        return bool(self.characteristics & IMAGE_FILE_32BIT_MACHINE)


@dataclass(frozen=True)
class DataDirectory:
    """One entry of the optional header's data directory table."""

    virtual_address: int
    size: int


@dataclass(frozen=True)
class NamedDataDirectory:
    """A non-empty data directory entry together with its index and name."""

    name: str
    idx: int
    virtual_address: int
    size: int


@dataclass(frozen=True)
class OptionalHeader:
    """The PE32 or PE32+ optional header."""

    magic: int
    major_linker_version: int
    minor_linker_version: int
    size_of_code: int
    size_of_initialized_data: int
    size_of_uninitialized_data: int
    address_of_entry_point: int
    base_of_code: int
    base_of_data: int | None
    image_base: int
    section_alignment: int
    file_alignment: int
    major_operating_system_version: int
    minor_operating_system_version: int
    major_image_version: int
    minor_image_version: int
    major_subsystem_version: int
    minor_subsystem_version: int
    win_32_version_value: int
    size_of_image: int
    size_of_headers: int
    checksum: int
    subsystem: int
    dll_characteristics: int
    size_of_stack_reserve: int
    size_of_stack_commit: int
    size_of_heap_reserve: int
    size_of_heap_commit: int
    loader_flags: int
    number_of_rva_and_sizes: int
    image_data_directory: list[DataDirectory] = field(default_factory=list)

    @classmethod
    def parse(cls, data: bytes, is_64_bit: bool) -> OptionalHeader:
        """Parse the optional header; ``is_64_bit`` selects the PE32+ layout."""
        reader = BinaryReader(data)

        magic = reader.read_u16()
        major_linker_version = reader.read_u8()
        minor_linker_version = reader.read_u8()
        size_of_code = reader.read_u32()
        size_of_initialized_data = reader.read_u32()
        size_of_uninitialized_data = reader.read_u32()
        address_of_entry_point = reader.read_u32()
        base_of_code = reader.read_u32()

        if is_64_bit:
            base_of_data = None
            image_base = reader.read_u64()
        else:
            base_of_data = reader.read_u32()
            image_base = reader.read_u32()

        section_alignment = reader.read_u32()
        file_alignment = reader.read_u32()
        major_os = reader.read_u16()
        minor_os = reader.read_u16()
        major_image = reader.read_u16()
        minor_image = reader.read_u16()
        major_subsystem = reader.read_u16()
        minor_subsystem = reader.read_u16()
        win_32_version_value = reader.read_u32()
        size_of_image = reader.read_u32()
        size_of_headers = reader.read_u32()
        checksum = reader.read_u32()
        subsystem = reader.read_u16()
        dll_characteristics = reader.read_u16()

        read_size = reader.read_u64 if is_64_bit else reader.read_u32
        stack_reserve = read_size()
        stack_commit = read_size()
        heap_reserve = read_size()
        heap_commit = read_size()

        loader_flags = reader.read_u32()
        number_of_rva_and_sizes = reader.read_u32()

        directories = []
        for _ in range(number_of_rva_and_sizes):
            virtual_address = reader.read_u32()
            size = reader.read_u32()
            directories.append(DataDirectory(virtual_address, size))

        return cls(
            magic=magic,
            major_linker_version=major_linker_version,
            minor_linker_version=minor_linker_version,
            size_of_code=size_of_code,
            size_of_initialized_data=size_of_initialized_data,
            size_of_uninitialized_data=size_of_uninitialized_data,
            address_of_entry_point=address_of_entry_point,
            base_of_code=base_of_code,
            base_of_data=base_of_data,
            image_base=image_base,
            section_alignment=section_alignment,
            file_alignment=file_alignment,
            major_operating_system_version=major_os,
            minor_operating_system_version=minor_os,
            major_image_version=major_image,
            minor_image_version=minor_image,
            major_subsystem_version=major_subsystem,
            minor_subsystem_version=minor_subsystem,
            win_32_version_value=win_32_version_value,
            size_of_image=size_of_image,
            size_of_headers=size_of_headers,
            checksum=checksum,
            subsystem=subsystem,
            dll_characteristics=dll_characteristics,
            size_of_stack_reserve=stack_reserve,
            size_of_stack_commit=stack_commit,
            size_of_heap_reserve=heap_reserve,
            size_of_heap_commit=heap_commit,
            loader_flags=loader_flags,
            number_of_rva_and_sizes=number_of_rva_and_sizes,
            image_data_directory=directories,
        )

    def is_64_bit(self) -> bool:
        return self.magic == PE32_PLUS_MAGIC

    def subsystem_name(self) -> str:
        return _SUBSYSTEMS.get(self.subsystem, "Undocumented")

    def dll_characteristics_list(self, human_readable: bool = True) -> list[str]:
        """Names or descriptions of the set DLL characteristic flags."""
        return _select_flags(self.dll_characteristics, _DLL_CHARACTERISTICS, human_readable)

    def named_data_directories(self) -> list[NamedDataDirectory]:
        """The well-known data directories that are present and non-empty."""
        return [
            NamedDataDirectory(name, idx, entry.virtual_address, entry.size)
            for idx, (name, entry) in enumerate(
                zip(_DATA_DIRECTORY_NAMES, self.image_data_directory)
            )
            if entry.virtual_address or entry.size
        ]