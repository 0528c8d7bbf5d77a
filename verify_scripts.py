import sys
import logging
import argparse
from pathlib import Path

# Add project root to path
sys.path.append(str(Path(__file__).parent))

from talkengine import ScriptDatabase
from dialogkit import DialogLibrary


def check_links(script_id, dialog, logger):
    """Report links that name no node. Returns the number found."""
    names = {node.name for node in dialog.nodes}
    problems = 0

    if dialog.start and dialog.start not in names:
        logger.warning(f"{script_id}: start node '{dialog.start}' does not exist")
        problems += 1

    for node in dialog.nodes:
        for index, line in enumerate(node.lines):
            targets = [line.link] + [r.link for r in line.responses]
            targets += [r.link for r in line.query.responses]
            for target in targets:
                if target and target not in names:
                    logger.warning(f"{script_id}: {node.name}[{index}] links to missing node '{target}'")
                    problems += 1

    return problems


def main():
    parser = argparse.ArgumentParser(description="Load and check every dialog script.")
    parser.add_argument("data_path", nargs="?", default="demos/data")
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO)
    logger = logging.getLogger("ScriptVerification")

    db = ScriptDatabase(Path(args.data_path))

    logger.info("Loading scripts...")
    db.load_all()

    library = DialogLibrary(db)
    problems = 0

    for script_id in library.ids():
        dialog = library.get(script_id)
        if dialog is None or dialog.is_empty:
            logger.error(f"{script_id}: no usable dialog")
            problems += 1
            continue

        line_count = sum(len(node.lines) for node in dialog.nodes)
        logger.info(f"{script_id}: {len(dialog.nodes)} nodes, {line_count} lines")
        problems += check_links(script_id, dialog, logger)

    if problems:
        logger.error(f"VERIFICATION FAILED: {problems} problem(s)")
        sys.exit(1)

    logger.info("VERIFICATION SUCCESSFUL: All scripts loaded and linked.")


if __name__ == "__main__":
    main()
