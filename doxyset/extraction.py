"""Doxygen extraction - produces the raw XML tree from a project Doxyfile."""

import shutil
import subprocess
from pathlib import Path

from doxyset.config_runtime import ConversionConfig
from doxyset.exceptions import ExtractionError
from doxyset.markup.config import INDEX_FILE
from doxyset.utils.logging import logger

DERIVED_DOXYFILE = "Doxyfile.doxyset"

RAW_XML_DIR = "xml"

# Appended after the user's settings; later assignments win in doxygen configs.
FORCED_OPTIONS = {
    "GENERATE_XML": "YES",
    "GENERATE_HTML": "NO",
    "GENERATE_LATEX": "NO",
    "GENERATE_RTF": "NO",
    "GENERATE_MAN": "NO",
    "XML_OUTPUT": RAW_XML_DIR,
    "XML_PROGRAMLISTING": "NO",
}


def derive_doxyfile(doxyfile: Path, working_dir: Path) -> Path:
    """Write a copy of the Doxyfile that forces XML output into working_dir."""
    try:
        content = doxyfile.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise ExtractionError(f"Cannot read Doxyfile {doxyfile}: {e}", identifier=str(doxyfile)) from e

    overrides = dict(FORCED_OPTIONS, OUTPUT_DIRECTORY=f'"{working_dir.resolve()}"')
    lines = [content.rstrip("\n"), "", "# doxyset overrides"]
    lines.extend(f"{key} = {value}" for key, value in overrides.items())

    working_dir.mkdir(parents=True, exist_ok=True)
    derived = working_dir / DERIVED_DOXYFILE
    derived.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return derived


def _run(config: ConversionConfig, args: list[str], cwd: Path) -> subprocess.CompletedProcess:
    """Invoke the doxygen executable, mapping every failure to ExtractionError."""
    try:
        result = subprocess.run(
            [config.doxygen_path, *args],
            cwd=str(cwd),
            capture_output=True,
            text=True,
            timeout=config.extraction_timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise ExtractionError(
            f"doxygen timed out after {config.extraction_timeout}s", identifier=config.doxygen_path
        ) from e
    except OSError as e:
        raise ExtractionError(
            f"Cannot run doxygen executable '{config.doxygen_path}': {e}", identifier=config.doxygen_path
        ) from e

    if result.returncode != 0:
        logger.debug(f"doxygen stderr:\n{result.stderr}")
        raise ExtractionError(
            f"doxygen failed (exit code {result.returncode}): {result.stderr.strip()[:500]}",
            identifier=config.doxygen_path,
        )
    return result


def generate_doxyfile(config: ConversionConfig) -> Path:
    """Create a default Doxyfile at config.doxyfile with ``doxygen -g``."""
    doxyfile = config.doxyfile.resolve()
    doxyfile.parent.mkdir(parents=True, exist_ok=True)
    logger.info(f"Doxyfile {config.doxyfile} not found, generating a default one")

    _run(config, ["-g", str(doxyfile)], doxyfile.parent)

    if not doxyfile.is_file():
        raise ExtractionError(f"doxygen did not create {doxyfile}", identifier=str(config.doxyfile))
    return doxyfile


def run_doxygen(config: ConversionConfig) -> Path:
    """Run doxygen for config.doxyfile and return the raw XML directory.

    A Doxyfile that does not exist yet is first generated with doxygen's
    defaults; the forced XML options are applied either way.

    Raises:
        ExtractionError: doxygen is missing, times out, exits non-zero, or
            does not produce an index document
    """
    if config.doxyfile is None:
        raise ExtractionError("No Doxyfile configured", identifier="doxyfile")
    if not config.doxyfile.exists():
        generate_doxyfile(config)
    elif not config.doxyfile.is_file():
        raise ExtractionError(f"Doxyfile is not a file: {config.doxyfile}", identifier=str(config.doxyfile))

    working_dir = config.extraction_dir
    derived = derive_doxyfile(config.doxyfile, working_dir)
    logger.info(f"Running {config.doxygen_path} on {config.doxyfile}")

    _run(config, [str(derived.resolve())], config.doxyfile.resolve().parent)

    xml_dir = working_dir / RAW_XML_DIR
    if not (xml_dir / INDEX_FILE).is_file():
        raise ExtractionError(f"doxygen produced no {INDEX_FILE} in {xml_dir}", identifier=str(xml_dir))

    logger.info(f"doxygen wrote raw XML to {xml_dir}")
    return xml_dir


def remove_extraction_dir(config: ConversionConfig) -> None:
    if config.extraction_dir.exists():
        shutil.rmtree(config.extraction_dir)
        logger.debug(f"Removed {config.extraction_dir}")
