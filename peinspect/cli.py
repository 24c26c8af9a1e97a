"""Command-line front end that prints a summary of a PE image's headers."""

from __future__ import annotations

import sys
from collections.abc import Sequence
from dataclasses import dataclass

from peinspect.errors import InvalidArgumentsError, PeError
from peinspect.parser import PeFile
from peinspect.timefmt import relative_time

PROG = "peinspect"

_HELP_LINES = (
    "PE File Analyzer",
    "A memory-safe tool for analyzing Windows PE files",
    "",
    "USAGE:",
    f"    {PROG} [OPTIONS] <FILE>",
    "",
    "ARGS:",
    "    <FILE>    Path to the PE file to analyze",
    "",
    "OPTIONS:",
    "    -h, --help       Show this help message",
    "    -v, --verbose    Enable verbose output",
    "    --dos            Show DOS Header",
    "    --coff           Show COFF File Header",
    "    --optional       Show Optional Header",
    "",
    "EXAMPLES:",
    f"    {PROG} example.exe",
)


@dataclass(frozen=True)
class Args:
    """Parsed command-line options."""

    file_path: str = ""
    verbose: bool = False
    show_help: bool = False
    show_dos: bool = False
    show_coff: bool = False
    show_optional_header: bool = False


_FLAGS = {
    "--help": "show_help",
    "-h": "show_help",
    "--verbose": "verbose",
    "-v": "verbose",
    "--dos": "show_dos",
    "--coff": "show_coff",
    "--optional": "show_optional_header",
}


def parse_args(argv: Sequence[str] | None = None) -> Args:
    """Parse command-line arguments, excluding the program name."""
    if argv is None:
        argv = sys.argv[1:]
    if not argv:
        raise InvalidArgumentsError("No file specified")

    flags = dict.fromkeys(_FLAGS.values(), False)
    file_path = ""
    for arg in argv:
        if arg in _FLAGS:
            flags[_FLAGS[arg]] = True
        elif arg.startswith("-"):
            raise InvalidArgumentsError(f"Unknown option: {arg}")
        elif not file_path:
            file_path = arg
        else:
            raise InvalidArgumentsError("Multiple files not supported")

    if flags["show_help"]:
        return Args(file_path="", **flags)
    if not file_path:
        raise InvalidArgumentsError("No file specified")
    return Args(file_path=file_path, **flags)


def help_text() -> str:
    """The usage message shown for ``--help``."""
    return "\n".join(_HELP_LINES) + "\n"


def _bullets(items: list[str], indent: str) -> list[str]:
    return [f"{indent}• {item}" for item in items]


def _overview(pe_file: PeFile, args: Args, now: int | None) -> list[str]:
    coff = pe_file.coff_header
    lines = [
        "PE File Analysis",
        "================",
        "",
        "📁 File Information:",
        f"   File: {args.file_path}",
        f"   File Size: {len(pe_file.data)} bytes",
        f"   File Type: {coff.file_type()}",
        f"   Architecture: {coff.machine_type()}",
        "",
        "🔧 PE Structure:",
        "   DOS Header Offset: 0x00000000",
        f"   PE Header Offset: 0x{pe_file.dos_header.e_lfanew:08X}",
        f"   Number of Sections: {coff.number_of_sections}",
        "",
        "📅 Compilation Info:",
    ]
    timestamp = coff.time_date_stamp
    if timestamp > 0:
        when = relative_time(timestamp, True, 4, now)
        lines.append(f"   Timestamp: {timestamp} ({when})")
    else:
        lines.append("   Timestamp: Not set")
    lines += ["", "⚙️  File Characteristics:"]

    characteristics = coff.characteristics_list(True)
    lines += _bullets(characteristics, "   ") if characteristics else ["   None"]

    if args.verbose:
        lines += [
            "",
            "🔍 Verbose Information:",
            f"   Machine Type: 0x{coff.machine:04X}",
            f"   Characteristics: 0x{coff.characteristics:04X}",
            f"   Symbol Table Offset: 0x{coff.pointer_to_symbol_table:08X}",
            f"   Number of Symbols: {coff.number_of_symbols}",
            f"   Optional Header Size: {coff.size_of_optional_header} bytes",
        ]
    return lines


def _dos_section(pe_file: PeFile) -> list[str]:
    dos = pe_file.dos_header
    label = "MZ" if dos.e_magic == 0x5A4D else "Invalid"
    return [
        "",
        "DOS Header",
        "==========",
        f"Magic Number: 0x{dos.e_magic:04X} ({label})",
        f"Bytes on last page: {dos.e_cblp}",
        f"Pages in file: {dos.e_cp}",
        f"Relocations: {dos.e_crlc}",
        f"Size of header (paragraphs): {dos.e_cparhdr}",
        f"PE Header Offset: 0x{dos.e_lfanew:08X}",
        "",
    ]


def _coff_section(pe_file: PeFile, now: int | None) -> list[str]:
    coff = pe_file.coff_header
    when = relative_time(coff.time_date_stamp, True, 4, now)
    lines = [
        "",
        "COFF File Header",
        "================",
        f"Machine Type: {coff.machine_type()} (0x{coff.machine:04X})",
        f"Number of Sections: {coff.number_of_sections}",
        f"Timestamp: {coff.time_date_stamp} ({when})",
        f"Symbol Table Offset: 0x{coff.pointer_to_symbol_table:08X}",
        f"Number of Symbols: {coff.number_of_symbols}",
        f"Optional Header Size: {coff.size_of_optional_header} bytes",
        f"Characteristics: 0x{coff.characteristics:04X}",
    ]
    characteristics = coff.characteristics_list(True)
    if characteristics:
        lines.append("  Flags:")
        lines += _bullets(characteristics, "    ")
    lines.append("")
    return lines


def _size_line(label: str, value: int) -> str:
    return f"   {label}: {value} bytes (0x{value:X})"


def _optional_section(pe_file: PeFile) -> list[str]:
    opt = pe_file.optional_header
    fmt = "PE32+" if opt.is_64_bit() else "PE32"
    lines = [
        "",
        "Optional Header",
        "===============",
        f"Format: {fmt} (Magic: 0x{opt.magic:04X})",
        f"Linker Version: {opt.major_linker_version}.{opt.minor_linker_version}",
        "",
        "📊 Code & Data:",
        _size_line("Code Size", opt.size_of_code),
        _size_line("Initialized Data", opt.size_of_initialized_data),
        _size_line("Uninitialized Data", opt.size_of_uninitialized_data),
        "",
        "💾 Memory Layout:",
        f"   Image Base: 0x{opt.image_base:016X}",
        f"   Entry Point: 0x{opt.address_of_entry_point:08X}",
        f"   Code Base: 0x{opt.base_of_code:08X}",
    ]
    if opt.base_of_data is not None:
        lines.append(f"   Data Base: 0x{opt.base_of_data:08X}")
    lines += [
        _size_line("Image Size", opt.size_of_image),
        _size_line("Headers Size", opt.size_of_headers),
        "",
        "📐 Alignment:",
        f"   Section Alignment: 0x{opt.section_alignment:X} ({opt.section_alignment} bytes)",
        f"   File Alignment: 0x{opt.file_alignment:X} ({opt.file_alignment} bytes)",
        "",
        "🔢 Version Info:",
        f"   OS Version: {opt.major_operating_system_version}."
        f"{opt.minor_operating_system_version}",
        f"   Image Version: {opt.major_image_version}.{opt.minor_image_version}",
        f"   Subsystem Version: {opt.major_subsystem_version}.{opt.minor_subsystem_version}",
        "",
        "🖥️  Target Environment:",
        f"   Subsystem: {opt.subsystem_name()} ({opt.subsystem})",
        f"   Checksum: 0x{opt.checksum:08X}",
        "",
        "🔒 Security Features:",
    ]
    dll_chars = opt.dll_characteristics_list(True)
    lines += _bullets(dll_chars, "   ") if dll_chars else ["   None"]
    lines += [
        "",
        "🧠 Memory Allocation:",
        _size_line("Stack Reserve", opt.size_of_stack_reserve),
        _size_line("Stack Commit", opt.size_of_stack_commit),
        _size_line("Heap Reserve", opt.size_of_heap_reserve),
        _size_line("Heap Commit", opt.size_of_heap_commit),
        "",
    ]
    if opt.image_data_directory:
        lines.append(f"📁 Data Directories ({opt.number_of_rva_and_sizes}):")
        lines += [
            f"   {d.name} ({d.idx}): RVA=0x{d.virtual_address:08X}, Size={d.size}"
            for d in opt.named_data_directories()
        ]
    return lines


def render(pe_file: PeFile, args: Args, now: int | None = None) -> str:
    """Build the full report for ``pe_file`` as selected by ``args``."""
    lines = _overview(pe_file, args, now)
    if args.show_dos:
        lines += _dos_section(pe_file)
    if args.show_coff:
        lines += _coff_section(pe_file, now)
    if args.show_optional_header:
        lines += _optional_section(pe_file)
    return "\n".join(lines) + "\n"


def run(args: Args) -> None:
    """Print help or analyse the file named in ``args``."""
    if args.show_help:
        sys.stdout.write(help_text())
        return
    pe_file = PeFile.from_file(args.file_path)
    sys.stdout.write(render(pe_file, args))


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for the command; returns the process exit status."""
    try:
        args = parse_args(argv)
    except InvalidArgumentsError as exc:
        print(f"Error parsing arguments:\n  {exc}", file=sys.stderr)
        print(file=sys.stderr)
        print(f"For help, use {PROG} --help", file=sys.stderr)
        return 1

    try:
        run(args)
    except PeError as exc:
        print(f"Analysis failed: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())