# peinspect

A small tool for reading the headers of Windows PE files (`.exe`, `.dll`,
`.sys` and similar). It reads the DOS header, the COFF file header and the
optional header (PE32 or PE32+), then prints a readable summary.

## Installation

```
pip install .
```

It needs Python 3.10 or later. It has no dependencies outside the standard
library. To run the tests, install the `test` extra (`pip install .[test]`)
and run `pytest`.

## Command line

```
peinspect [OPTIONS] <FILE>
```

Options:

- `-h`, `--help`: show the help message
- `-v`, `--verbose`: add raw COFF header values to the overview
- `--dos`: show the DOS header
- `--coff`: show the COFF file header
- `--optional`: show the optional header, including the non-empty data
  directories

Example:

```
peinspect --coff --optional example.exe
```

The overview always appears. It gives the file size, the file type, the
architecture, the PE header offset, the section count, the link timestamp
with its age (for example `3y 2M 1w 4d ago`, or `Not set` when the timestamp
is zero), and the characteristic flags.

The command takes exactly one file. An unknown option, a second file name or
a missing file name is an argument error. If the arguments are wrong or the
analysis fails, the command writes an error to standard error and exits with
status 1.

## Library use

```python
from peinspect.parser import PeFile

pe = PeFile.from_file("example.exe")
print(pe.coff_header.machine_type())
print(pe.coff_header.file_type())
print(pe.coff_header.characteristics_list(human_readable=False))
print(pe.optional_header.is_64_bit())
print(pe.optional_header.subsystem_name())
for directory in pe.optional_header.named_data_directories():
    print(directory.name, hex(directory.virtual_address), directory.size)
```

`PeFile.from_bytes` parses a buffer that is already in memory. The header
classes (`DosHeader`, `CoffHeader`, `OptionalHeader`, `DataDirectory`,
`NamedDataDirectory`) live in `peinspect.structures` and are frozen
dataclasses.

The report that the command prints can also be built as a string:
`peinspect.cli.parse_args` turns an argument list into an `Args` value, and
`peinspect.cli.render(pe_file, args, now=None)` returns the report text;
`now` fixes the reference time for the timestamp's age.

Every failure raises a subclass of `peinspect.errors.PeError`:

- `NotPeFileError`: no `MZ` magic or no `PE\0\0` signature
- `CorruptedFileError`: truncated data or a bad PE header offset
- `InvalidHeaderError`: a DOS or COFF header that is too small
- `PeIoError`: the file could not be read
- `InvalidArgumentsError`: unusable command-line or function arguments

`peinspect.reader.BinaryReader` is the little-endian cursor that the parser
uses. `peinspect.timefmt.relative_time` formats a Unix timestamp relative to
the current time, or to a given `now`.

## What it does not do

peinspect reads only the three headers above. It does not read the section
table, imports, exports, resources or relocations, and it does not
disassemble code; the data directories are listed by address and size only.