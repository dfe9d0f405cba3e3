"""
Agri Advisor: CLI entry point.

Every command:
  1. Loads ``AppConfig`` via ``load_config()``.
  2. Configures logging (stderr, plus the configured log file).
  3. Opens one connection for the duration of the command.
  4. Prints its result to stdout: status lines for maintenance commands,
     JSON for data commands.

Install and run::

    pip install -e .
    agri-advisor init-db
    agri-advisor import-data examples.json
    agri-advisor generate user-1 --season fall
    agri-advisor list user-1
    agri-advisor show <set-id>
    agri-advisor delete <set-id>
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer
from pydantic import ValidationError

app = typer.Typer(
    name="agri-advisor",
    help="Agricultural business recommendation engine: local CLI.",
    add_completion=False,
)

_CONFIG_OPTION = typer.Option(None, "--config", help="Path to TOML config file.")


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from agri_advisor.config import load_config

    try:
        return load_config(Path(config_path) if config_path else None)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except (ValidationError, ValueError) as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config) -> None:
    from agri_advisor.utils.logging import configure_logging
    configure_logging(config.logging)


def _open_store(config):
    """Connection scoped to one command."""
    from agri_advisor.db.connection import connect_from_config
    return connect_from_config(config.database)


def _prepare(conn) -> None:
    from agri_advisor.db.migrations import run_migrations
    from agri_advisor.db.schema import apply_schema

    apply_schema(conn)
    run_migrations(conn)


def _echo_json(payload: Any) -> None:
    typer.echo(json.dumps(payload, indent=2, default=str))


def _service(conn, config):
    from agri_advisor.services.recommendation_service import RecommendationService
    return RecommendationService(conn, config.engine)


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("init-db")
def init_db(
    db_path: Optional[str] = typer.Option(
        None,
        "--db-path",
        help="Override DB path from config (e.g. data/db/test.db).",
    ),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Create the SQLite database, apply the schema, and run migrations.

    Safe to run repeatedly.
    """
    from agri_advisor.db.connection import get_connection
    from agri_advisor.db.migrations import run_migrations
    from agri_advisor.db.schema import ALL_TABLE_NAMES, apply_schema

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    target_path = db_path or config.database.db_path
    typer.echo(f"Initializing database at: {target_path}")

    with get_connection(
        target_path,
        wal_mode=config.database.wal_mode,
        busy_timeout_ms=config.database.busy_timeout_ms,
    ) as conn:
        apply_schema(conn)
        migrations_applied = run_migrations(conn)

    typer.echo(f"  Tables: {len(ALL_TABLE_NAMES)} created/verified.")
    typer.echo(f"  Migrations applied: {migrations_applied}")
    typer.echo("[OK] Database ready.")


@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = _CONFIG_OPTION,
    show_full: bool = typer.Option(False, "--full", help="Print the full config as JSON."),
) -> None:
    """Validate the configuration and print the parsed values.

    Exits with code 1 if validation fails.
    """
    config = _load_config_or_exit(config_path)

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Database path:       {config.database.db_path}")
    typer.echo(f"  Product name:        {config.engine.product_name}")
    typer.echo(f"  Max recommendations: {config.engine.max_recommendations}")
    typer.echo(f"  Log level:           {config.logging.level}")
    typer.echo(f"  Debug mode:          {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        _echo_json(config.model_dump())

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("import-data")
def import_data(
    data_file: str = typer.Argument(
        ...,
        help="JSON file with 'analysis_results' and 'conversations' arrays.",
    ),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Load analysis results and chat conversations from a JSON file.

    Conversation entries may carry a nested ``messages`` array; each message
    is stored under the newly created conversation.
    """
    from agri_advisor.db.repositories.analysis_repo import AnalysisResultRepository
    from agri_advisor.db.repositories.chat_repo import ChatRepository
    from agri_advisor.models.analysis import AnalysisResult
    from agri_advisor.models.chat import ChatMessage, Conversation

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    path = Path(data_file)
    if not path.exists():
        typer.echo(f"[ERROR] Data file not found: {path}", err=True)
        raise typer.Exit(code=1)

    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] JSON parse error: {exc}", err=True)
        raise typer.Exit(code=1)

    if not isinstance(raw, dict):
        typer.echo("[ERROR] Data file must contain a JSON object.", err=True)
        raise typer.Exit(code=1)

    try:
        analyses = [AnalysisResult.model_validate(r) for r in raw.get("analysis_results", [])]
        conversations = [
            (
                Conversation.model_validate({k: v for k, v in c.items() if k != "messages"}),
                c.get("messages", []),
            )
            for c in raw.get("conversations", [])
        ]
    except (ValidationError, AttributeError, TypeError) as exc:
        typer.echo(f"[ERROR] Invalid record in data file: {exc}", err=True)
        raise typer.Exit(code=1)

    message_count = 0
    with _open_store(config) as conn:
        _prepare(conn)
        analysis_repo = AnalysisResultRepository(conn)
        chat_repo = ChatRepository(conn)

        for analysis in analyses:
            analysis_repo.insert(analysis)

        for conversation, messages in conversations:
            stored = chat_repo.insert_conversation(conversation)
            try:
                chat_messages = [
                    ChatMessage.model_validate({**message, "conversation_id": stored.id})
                    for message in messages
                ]
            except (ValidationError, TypeError) as exc:
                typer.echo(f"[ERROR] Invalid chat message: {exc}", err=True)
                raise typer.Exit(code=1)
            for chat_message in chat_messages:
                chat_repo.insert_message(chat_message)
                message_count += 1

    typer.echo(f"  Analysis results imported: {len(analyses)}")
    typer.echo(f"  Conversations imported:    {len(conversations)}")
    typer.echo(f"  Messages imported:         {message_count}")
    typer.echo("[OK] Data imported.")


@app.command("generate")
def generate_command(
    user_id: str = typer.Argument(..., help="User to generate recommendations for."),
    season: Optional[str] = typer.Option(
        None,
        "--season",
        help="Current season: spring, summer, fall, or winter.",
    ),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Generate, store, and print a new recommendation set."""
    from agri_advisor.taxonomy.recommendation_taxonomy import Season

    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    try:
        parsed_season = Season(season.lower()) if season else None
    except ValueError:
        valid = ", ".join(s.value for s in Season)
        typer.echo(f"[ERROR] Invalid season {season!r}. Expected one of: {valid}.", err=True)
        raise typer.Exit(code=1)

    with _open_store(config) as conn:
        _prepare(conn)
        view = _service(conn, config).generate_for_user(user_id, season=parsed_season)

    _echo_json(view.model_dump(mode="json"))


@app.command("list")
def list_command(
    user_id: str = typer.Argument(..., help="User whose sets to list."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Print every stored recommendation set of a user, newest first."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config) as conn:
        _prepare(conn)
        views = _service(conn, config).list_for_user(user_id)

    _echo_json([v.model_dump(mode="json") for v in views])


@app.command("show")
def show_command(
    set_id: str = typer.Argument(..., help="Recommendation set id."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Print one stored recommendation set. Exits with code 1 if absent."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config) as conn:
        _prepare(conn)
        view = _service(conn, config).get_set(set_id)

    if view is None:
        typer.echo(f"[ERROR] Recommendation set not found: {set_id}", err=True)
        raise typer.Exit(code=1)

    _echo_json(view.model_dump(mode="json"))


@app.command("delete")
def delete_command(
    set_id: str = typer.Argument(..., help="Recommendation set id."),
    config_path: Optional[str] = _CONFIG_OPTION,
) -> None:
    """Delete a recommendation set and all of its items."""
    config = _load_config_or_exit(config_path)
    _configure_logging(config)

    with _open_store(config) as conn:
        _prepare(conn)
        _service(conn, config).delete_set(set_id)

    typer.echo(f"[OK] Deleted recommendation set {set_id}.")


# ── Entry point ───────────────────────────────────────────────────────────────

if __name__ == "__main__":
    app()
