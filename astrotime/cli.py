from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from astrotime.core import time_kernel as tk
from astrotime.core.errors import TimeKernelError
from astrotime.core.leapseconds import LeapSecondTable
from astrotime.core.leapsource import fetch_tai_utc_data, load_leap_second_table
from astrotime.core.timescales import TimeScale

_SCALES = [s.value for s in TimeScale]


def _scale(value: str) -> TimeScale:
    try:
        return TimeScale.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e))


def _table(args: argparse.Namespace) -> Optional[LeapSecondTable]:
    if args.table:
        return load_leap_second_table(args.table)
    return None


def cmd_convert(args: argparse.Namespace) -> int:
    print(f"{tk.convert_scale(args.jd, args.from_scale, args.to_scale, table=_table(args)):.9f}")
    return 0


def cmd_to_gregorian(args: argparse.Namespace) -> int:
    print(tk.jd_to_gregorian_string(args.jd, args.from_scale, args.to_scale, table=_table(args)))
    return 0


def cmd_to_jd(args: argparse.Namespace) -> int:
    print(f"{tk.gregorian_string_to_jd(args.date, args.from_scale, args.to_scale, table=_table(args)):.9f}")
    return 0


def cmd_regrid(args: argparse.Namespace) -> int:
    print(tk.gregorian_string_to_gregorian_string(
        args.date, args.from_scale, args.to_scale, table=_table(args)
    ))
    return 0


def cmd_offset(args: argparse.Namespace) -> int:
    table = _table(args) or tk.get_leap_second_table()
    print(f"TAI-UTC = {table.offset_seconds(args.jd):.7f} s  ({table.source})")
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    from astrotime.core.validation import cross_validate

    report = cross_validate(args.jd, table=_table(args))
    print(f"reference       {report.reference_source}")
    print(f"TAI-UTC diff    {report.tai_utc_difference_seconds:.3e} s")
    print(f"TT diff         {report.tt_difference_seconds:.3e} s")
    print(f"TDB-TT diff     {report.tdb_tt_difference_seconds:.3e} s")
    print(f"calendar diff   {report.calendar_difference_seconds:.3e} s")
    for note in report.notes:
        print(f"note            {note}")
    print("PASS" if report.passed_tolerance else "FAIL")
    return 0 if report.passed_tolerance else 1


def cmd_fetch(args: argparse.Namespace) -> int:
    path = fetch_tai_utc_data(args.path, update=args.update, url=args.url)
    table = load_leap_second_table(path)
    print(f"{path}: {len(table)} records, last effective JD {table.last_jd}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="astrotime", description="TAI/UTC/TT/TDB and Julian Day <-> Gregorian conversions")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    p.add_argument("--table", help="tai-utc.dat or JSON leap-second table (default: built-in or $ASTROTIME_TAI_UTC_FILE)")
    sub = p.add_subparsers(dest="cmd", required=True)

    def scales(sp: argparse.ArgumentParser) -> None:
        sp.add_argument("from_scale", type=_scale, metavar="FROM", help="/".join(_SCALES))
        sp.add_argument("to_scale", type=_scale, metavar="TO", help="/".join(_SCALES))

    sp = sub.add_parser("convert", help="JD -> JD across scales")
    sp.add_argument("jd", type=float)
    scales(sp)
    sp.set_defaults(func=cmd_convert)

    sp = sub.add_parser("to-gregorian", help="JD -> YYYY-MM-DDThh:mm:ss.mmm across scales")
    sp.add_argument("jd", type=float)
    scales(sp)
    sp.set_defaults(func=cmd_to_gregorian)

    sp = sub.add_parser("to-jd", help="YYYY-MM-DDThh:mm:ss.mmm -> JD across scales")
    sp.add_argument("date")
    scales(sp)
    sp.set_defaults(func=cmd_to_jd)

    sp = sub.add_parser("regrid", help="Gregorian string -> Gregorian string across scales")
    sp.add_argument("date")
    scales(sp)
    sp.set_defaults(func=cmd_regrid)

    sp = sub.add_parser("offset", help="TAI-UTC at a JD(UTC)")
    sp.add_argument("jd", type=float)
    sp.set_defaults(func=cmd_offset)

    sp = sub.add_parser("validate", help="cross-check conversions at a JD(UTC) against ERFA")
    sp.add_argument("jd", type=float)
    sp.set_defaults(func=cmd_validate)

    sp = sub.add_parser("fetch", help="download USNO tai-utc.dat")
    sp.add_argument("path", nargs="?", default="data/tai-utc.dat")
    sp.add_argument("--update", action="store_true", help="download even if the file exists")
    sp.add_argument("--url", default=None)
    sp.set_defaults(func=cmd_fetch)

    return p


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except (TimeKernelError, ValueError) as e:
        print(f"astrotime: {e}", file=sys.stderr)
        return 2


if __name__ == "__main__":
    raise SystemExit(main())
