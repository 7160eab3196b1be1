import logging
import os
from pathlib import Path
from sys import argv

logger = logging.getLogger(__name__)

package_directory = Path(os.path.abspath(__file__)).parent

working_directory = Path(os.getcwd())


def find_default(name: str) -> Path:
    """
    Look for a folder called ``name`` next to where the program runs.

    The candidates are, in order: the current working directory, its
    parent, the package directory and the directory holding the package
    (a source checkout). Tests and scripts therefore find the configs
    whether they are launched from the repository root or from a
    sub-folder.

    Parameters
    ----------
    name
        folder name, e.g. "configs"

    Returns
    -------
    The first existing candidate
    """
    candidates = [
        working_directory,
        working_directory.parent,
        package_directory,
        package_directory.parent,
    ]
    for directory in candidates:
        path = directory / name
        if path.exists():
            return path
    raise FileNotFoundError(f"Could not find a default path for {name}")


def path_for_name(name: str) -> Path:
    """
    Path given on the command line as ``--name PATH``, or the default
    location found by ``find_default``.
    """
    flag = f"--{name}"
    try:
        path = Path(argv[argv.index(flag) + 1])
    except (IndexError, ValueError):
        path = find_default(name)
        logger.debug(f"No {flag} argument given - defaulting to {path}")
        return path
    if not path.exists():
        raise FileNotFoundError(f"No such folder {path}")
    return path


configs_path = path_for_name("configs")
