# lastview

`lastview` reads the login records kept in `/var/log/wtmp` (or `/var/log/btmp`
for failed logins) and prints who logged in, on which terminal, from where,
when, and for how long, newest records first.

## Installing

```
pip install .
```

Python 3.10 or later is required. No third-party libraries are needed.

## Commands

### `lastview`

Lists logins and logouts and system reboots from `/var/log/wtmp`.

```
lastview [options] [<username>...] [<tty>...]
```

Names given after the options limit the listing to those users or terminals
(`tty1` may also be given as `1`).

Options the command acts on:

| Option | Meaning |
| --- | --- |
| `-a`, `--hostlast` | show the host name in the last column |
| `--time-format <format>` | timestamp style: `notime`, `short` (the default), `full` or `iso` |

Each session line shows the user, the terminal, the host, the login time,
the logout time and the session length. Sessions without a logout record
are shown as `still logged in`, `crash`, `down` or `gone - no logout`.
After the listing a line such as `wtmp begins Mon Jan  1 10:00:00 2024`
states when the file starts (left out with `--time-format notime`).

When the command runs under the name `lastb`, it reads `/var/log/btmp`
instead and lists every record as it stands.

Pressing Ctrl-C stops the listing with a message naming the date reached;
a quit signal prints that message and carries on.

### `slast`

A small companion that prints boot and login records from `/var/log/wtmp`,
newest first, one per line: user, terminal, host and a short date.

```
slast        # every record
slast 10     # only the ten most recent
```

A count that is not a positive number is refused with an error.

## Using it from Python

```python
import io
from lastview.report import LastControl, process_wtmp_file

out = io.StringIO()
process_wtmp_file(LastControl(), "/var/log/wtmp", out, None)
print(out.getvalue())
```

`LastControl` holds every setting of a listing: `lastb`, `extended`
(shutdowns, run level and clock changes), `showhost`, `altlist`, `usedns`,
`useip`, `name_len`, `domain_len`, `maxrecs`, `show`, `since`, `until`,
`present`, `boot_time` and `time_fmt` (a `lastview.timefmt.TimeFormat`).
`process_wtmp_file` reads any file name given to it and returns the
`LastReport` it used.

`lastview.utmp.UtmpRecord` reads and writes single records with
`from_bytes` and `to_bytes`, and `lastview.utmp.iter_records_reversed`
walks a record file from its end. `lastview.hosts.lookup_host` turns a
stored address into a host name or a numeric address.

## What the command does not do

The `lastview` command recognises the other options of its help text
(`-f`, `-n`, `-<number>`, `-s`, `-t`, `-p`, `-d`, `-i`, `-R`, `-w`, `-x`,
`-F`, `-h`, `-V`) but does not carry them out: given any of them it points
to `--help` and exits with status 1, and it prints no help text of its own.
It always reads the default file. Limits, time windows, DNS lookups and
extended entries are available only through `LastControl` from Python.

## Running the tests

```
pip install .[test]
pytest
```