"""
Dialog Demo: Console Walk-Through

Demonstrates:
- Loading text and JSON scripts through the ScriptDatabase
- Agents with keyword tables
- Conditionals, visit counts, variables and built-in math functions
- Queries handled by a separate presenter
- Event bus notifications

Run: python -m demos.dialog_demo [--config config.json]
"""

import argparse
import logging
from pathlib import Path

from talkengine import EngineConfig, EventBus, DialogEvent, ScriptDatabase, configure_logging
from dialogkit import (
    ConsolePresenter,
    ConsoleQueryPresenter,
    DialogLibrary,
    DialogProcessor,
    KeywordResponder,
    VariableStore,
)

DATA_PATH = Path(__file__).parent / "data"

logger = logging.getLogger("DialogDemo")


def build_config(path: str | None) -> EngineConfig:
    if path:
        return EngineConfig.from_file(path)
    return EngineConfig(
        player_name="Ada",
        data_path=str(DATA_PATH),
        log_level="WARNING",
        initial_vars={"gold": "20"},
    )


def main():
    parser = argparse.ArgumentParser(description="Talk to the gate guard and the merchant.")
    parser.add_argument("--config", help="JSON engine config")
    args = parser.parse_args()

    config = build_config(args.config)
    configure_logging(config)

    database = ScriptDatabase(config.data_path)
    database.load_all()
    library = DialogLibrary(database, strict_responses=config.strict_responses)

    events = EventBus()

    def on_node(event):
        logger.info(f"Entered node {event.payload.node}")

    events.subscribe(DialogEvent.NODE_ENTERED, on_node)

    variables = VariableStore(config.initial_vars)
    processor = DialogProcessor(
        variables,
        presenter=ConsolePresenter(),
        query_presenter=ConsoleQueryPresenter(),
        event_bus=events,
        config=config,
    )
    processor.add_responder(KeywordResponder(
        keywords={"town": "Lowmere"},
    ))
    # Let scripts show the live gold amount
    processor.add_responder(_VariableKeywords(variables))

    guard = library.create_agent("guard", display_name="Captain Brann")
    merchant = library.create_agent("merchant")
    agents = {agent.name: agent for agent in (guard, merchant) if agent is not None}

    if not agents:
        logger.error(f"No scripts found under {config.data_path}")
        return

    while True:
        names = [name for name, agent in agents.items() if agent.enabled]
        if not names:
            print("Nobody wants to talk to you.")
            break

        print(f"Talk to: {', '.join(names)} (blank to quit)")
        choice = input("> ").strip()
        if not choice:
            break
        agent = agents.get(choice)
        if agent is None or not agent.enabled:
            print("No one by that name.")
            continue

        agent.initiate_dialog(processor, on_exit=lambda: print("(conversation over)"))

    print(f"Final variables: {variables.export_text()}")


class _VariableKeywords(KeywordResponder):
    """Exposes every variable as a keyword."""

    def __init__(self, variables: VariableStore):
        super().__init__()
        self.variables = variables

    def get_keyword(self, key):
        return self.variables.get(key)


if __name__ == "__main__":
    main()
