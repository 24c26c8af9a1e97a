import struct

import pytest

from peinspect.cli import Args, help_text, main, parse_args, render
from peinspect.errors import InvalidArgumentsError
from peinspect.parser import PeFile
from peinspect.timefmt import relative_time


def build_pe(
    is_64=False,
    machine=0x14C,
    timestamp=0,
    characteristics=0x0102,
    dll_chars=0x0140,
    dirs=((0, 0), (0x2000, 40)),
):
    dos = struct.pack("<30Hi", 0x5A4D, 0x90, 3, 0, 4, *([0] * 25), 64)
    head = struct.pack(
        "<HBBIIIII", 0x20B if is_64 else 0x10B, 14, 2, 0x1000, 0x200, 0, 0x1100, 0x1000
    )
    if is_64:
        bases = struct.pack("<Q", 0x140000000)
    else:
        bases = struct.pack("<II", 0x3000, 0x400000)
    middle = struct.pack(
        "<IIHHHHHHIIIIHH", 0x1000, 0x200, 6, 0, 1, 0, 6, 0, 0, 0x5000, 0x400, 0, 3, dll_chars
    )
    sizes = struct.pack("<QQQQ" if is_64 else "<IIII", 0x100000, 0x1000, 0x100000, 0x1000)
    tail = struct.pack("<II", 0, len(dirs))
    tail += b"".join(struct.pack("<II", va, size) for va, size in dirs)
    optional = head + bases + middle + sizes + tail
    coff = struct.pack("<HHIIIHH", machine, 3, timestamp, 0, 0, len(optional), characteristics)
    return dos + b"PE\x00\x00" + coff + optional


@pytest.fixture
def pe_path(tmp_path):
    path = tmp_path / "sample.exe"
    path.write_bytes(build_pe())
    return path


def test_parse_args_file_only():
    args = parse_args(["a.exe"])
    assert args == Args(file_path="a.exe")


def test_parse_args_all_flags():
    args = parse_args(["-v", "--dos", "--coff", "--optional", "a.exe"])
    assert args.verbose and args.show_dos and args.show_coff and args.show_optional_header
    assert args.file_path == "a.exe"
    assert not args.show_help


def test_parse_args_help_clears_file():
    args = parse_args(["a.exe", "--help"])
    assert args.show_help is True
    assert args.file_path == ""


def test_parse_args_help_without_file():
    assert parse_args(["-h"]).show_help is True


def test_parse_args_unknown_option():
    with pytest.raises(InvalidArgumentsError) as info:
        parse_args(["-x", "a.exe"])
    assert info.value.message == "Unknown option: -x"


def test_parse_args_multiple_files():
    with pytest.raises(InvalidArgumentsError) as info:
        parse_args(["a.exe", "b.exe"])
    assert info.value.message == "Multiple files not supported"


@pytest.mark.parametrize("argv", [[], ["--verbose"]])
def test_parse_args_missing_file(argv):
    with pytest.raises(InvalidArgumentsError) as info:
        parse_args(argv)
    assert info.value.message == "No file specified"


def test_help_text_lists_options():
    text = help_text()
    assert text.startswith("PE File Analyzer\n")
    for option in ("--help", "--verbose", "--dos", "--coff", "--optional"):
        assert option in text


def test_render_overview():
    pe = PeFile.from_bytes(build_pe())
    out = render(pe, Args(file_path="x.exe"), now=0).splitlines()
    assert "   File: x.exe" in out
    assert f"   File Size: {len(pe.data)} bytes" in out
    assert "   File Type: Executable (EXE)" in out
    assert "   Architecture: Intel 386 or later processors and compatible processors" in out
    assert "   PE Header Offset: 0x00000040" in out
    assert "   Timestamp: Not set" in out
    assert "   • 32-bit word machine" in out
    assert "🔍 Verbose Information:" not in out
    assert "DOS Header" not in out


def test_render_timestamp_uses_relative_time():
    pe = PeFile.from_bytes(build_pe(timestamp=1000))
    now = 5000
    out = render(pe, Args(file_path="x.exe"), now=now).splitlines()
    assert f"   Timestamp: 1000 ({relative_time(1000, True, 4, now)})" in out


def test_render_no_characteristics():
    pe = PeFile.from_bytes(build_pe(characteristics=0))
    out = render(pe, Args(file_path="x.exe"), now=0).splitlines()
    idx = out.index("⚙️  File Characteristics:")
    assert out[idx + 1] == "   None"
    assert "   File Type: Unknown" in out


def test_render_verbose():
    pe = PeFile.from_bytes(build_pe())
    out = render(pe, Args(file_path="x.exe", verbose=True), now=0).splitlines()
    assert "   Machine Type: 0x014C" in out
    assert "   Characteristics: 0x0102" in out
    assert f"   Optional Header Size: {pe.coff_header.size_of_optional_header} bytes" in out


def test_render_dos_section():
    pe = PeFile.from_bytes(build_pe())
    out = render(pe, Args(file_path="x.exe", show_dos=True), now=0).splitlines()
    assert "Magic Number: 0x5A4D (MZ)" in out
    assert "Pages in file: 3" in out
    assert "PE Header Offset: 0x00000040" in out


def test_render_coff_section():
    pe = PeFile.from_bytes(build_pe(timestamp=1000))
    out = render(pe, Args(file_path="x.exe", show_coff=True), now=2000).splitlines()
    assert (
        "Machine Type: Intel 386 or later processors and compatible processors (0x014C)"
        in out
    )
    assert "  Flags:" in out
    assert "    • 32-bit word machine" in out


def test_render_optional_pe32():
    pe = PeFile.from_bytes(build_pe())
    out = render(pe, Args(file_path="x.exe", show_optional_header=True), now=0).splitlines()
    assert "Format: PE32 (Magic: 0x010B)" in out
    assert "   Data Base: 0x00003000" in out
    assert "   Image Base: 0x0000000000400000" in out
    assert "   Subsystem: The Windows character subsystem (3)" in out
    assert "   • NX Compatible" in out
    assert "📁 Data Directories (2):" in out
    assert "   Import Directory (1): RVA=0x00002000, Size=40" in out
    assert not any(line.startswith("   Export Directory") for line in out)


def test_render_optional_pe32_plus():
    pe = PeFile.from_bytes(build_pe(is_64=True, machine=0x8664, dll_chars=0))
    out = render(pe, Args(file_path="x.exe", show_optional_header=True), now=0).splitlines()
    assert "Format: PE32+ (Magic: 0x020B)" in out
    assert "   Image Base: 0x0000000140000000" in out
    assert not any(line.startswith("   Data Base") for line in out)
    idx = out.index("🔒 Security Features:")
    assert out[idx + 1] == "   None"


def test_render_optional_without_directories():
    pe = PeFile.from_bytes(build_pe(dirs=()))
    out = render(pe, Args(file_path="x.exe", show_optional_header=True), now=0)
    assert "Data Directories" not in out


def test_main_success(pe_path, capsys):
    assert main([str(pe_path)]) == 0
    out = capsys.readouterr().out
    assert out.startswith("PE File Analysis\n")
    assert f"   File: {pe_path}" in out.splitlines()


def test_main_help(capsys):
    assert main(["--help"]) == 0
    assert capsys.readouterr().out == help_text()


def test_main_bad_arguments(capsys):
    assert main(["--bogus"]) == 1
    err = capsys.readouterr().err
    assert err.startswith("Error parsing arguments:\n  Invalid Arguments: Unknown option: --bogus")


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.exe")]) == 1
    assert capsys.readouterr().err.startswith("Analysis failed: I/O error")


def test_main_not_pe(tmp_path, capsys):
    path = tmp_path / "junk.bin"
    path.write_bytes(b"\x00" * 128)
    assert main([str(path)]) == 1
    assert capsys.readouterr().err == "Analysis failed: Not a PE file\n"