"""Console demo: interest calculations routed through both interceptors.

Run with ``python -m aoplog``. The last calculation is expected to fail
with a validation error, which is reported and treated as success.
"""

import argparse
import sys
from decimal import Decimal
from typing import List, Optional, TextIO

from .config import DictSource, EnvSource, SettingsSource, file_source, load_settings
from .container import binding, init
from .exceptions import AopError
from .interceptors import ConsoleInterceptor, LoggingInterceptor
from .log_setup import close_logging, configure_logging
from .rates import RateCalculator, RateCalculatorInterface

CALCULATIONS = (
    (100000000, Decimal("0.312"), 0, 85),
    (100000000, Decimal("0.32078"), 0, 91),
    (100000000, Decimal("0.31115"), 0, 92),
    (100000000, 0, 0, 92),
    (100000000, 0, 0, 0),
)


def _parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="aoplog", description=__doc__.splitlines()[0])
    p.add_argument("--config", help="JSON or YAML file with a 'logging' section")
    p.add_argument("--log-file", help="rolling log file path (overrides config)")
    p.add_argument("--debug", action="store_true", help="also record execution times")
    return p


def _sources(args: argparse.Namespace) -> List[SettingsSource]:
    sources: List[SettingsSource] = []
    if args.config:
        sources.append(file_source(args.config))
    sources.append(EnvSource())
    overrides = {}
    if args.log_file:
        overrides["log_file"] = args.log_file
    if args.debug:
        overrides["level"] = "DEBUG"
    if overrides:
        sources.append(DictSource(overrides))
    return sources


def main(argv: Optional[List[str]] = None, out: Optional[TextIO] = None) -> int:
    out = out or sys.stdout
    args = _parser().parse_args(argv)

    out.write("Hello AOPLogger!\n\n")
    try:
        settings = load_settings(*_sources(args))
    except AopError as e:
        out.write(f"{e}\n")
        return 2

    logger = configure_logging(settings)
    try:
        container = init(
            [
                binding(
                    RateCalculatorInterface,
                    lambda: RateCalculator(logger),
                    ConsoleInterceptor(out),
                    LoggingInterceptor(logger),
                )
            ],
            eager=True,
        )
        calc = container.get(RateCalculatorInterface)
        try:
            for call in CALCULATIONS:
                calc.calculate(*call)
            out.write("Test Finished\n")
        except ValueError as e:
            out.write(f"{e}\n")
            out.write("Test Failed (As expected).\n")
        container.shutdown()
    finally:
        close_logging(logger)
    return 0


if __name__ == "__main__":
    sys.exit(main())
