from __future__ import annotations
import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .app_controller import AppController, open_system
from .settings import ensure_data_dirs, load_settings, resolve_data_dirs
from .ui.console import Console
from .version import __version__

_LOG_FORMAT = '%(asctime)s %(levelname)s %(name)s: %(message)s'


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog='clinicease', description="Clinic patient, appointment and prescription records")
    parser.add_argument('--config', help="YAML settings file (default: ./clinicease.yaml)")
    parser.add_argument('--data-dir', dest='data_dir', help="Directory holding the record files")
    parser.add_argument('--prescriptions-dir', dest='prescriptions_dir', help="Where prescription HTML/PDF files are written")
    parser.add_argument('--log-level', dest='log_level', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'], type=str.upper)
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    return parser.parse_args(argv)


def configure_logging(level: str, log_file: Path) -> None:
    handler: logging.Handler
    try:
        handler = logging.FileHandler(log_file, encoding='utf-8')
    except OSError:
        # console stays reserved for command output
        handler = logging.NullHandler()
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root = logging.getLogger('clinicease')
    for old in root.handlers:
        old.close()
    root.handlers[:] = [handler]
    root.setLevel(getattr(logging, level, logging.INFO))
    root.propagate = False


def main(argv: Optional[list[str]] = None, console: Optional[Console] = None) -> int:
    load_dotenv()
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    settings = load_settings(args.config, overrides={
        'data_dir': args.data_dir,
        'prescriptions_dir': args.prescriptions_dir,
        'log_level': args.log_level,
    })
    dirs = resolve_data_dirs(settings)
    ensure_data_dirs(dirs)
    configure_logging(settings['log_level'], dirs.log_file)
    logging.getLogger('clinicease').info("ClinicEase %s starting, data in %s", __version__, dirs.root)

    console = console or Console()
    system = open_system(dirs.root, console)
    AppController(system, console, dirs.prescriptions).run()
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
