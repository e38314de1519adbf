from __future__ import annotations

import json

import typer
import uvicorn

from jtutors.api.app import create_app
from jtutors.config import get_settings
from jtutors.core.accounts import AccountService
from jtutors.core.profile import TutorProfileService
from jtutors.db.init import init_database
from jtutors.db.repositories import Repository
from jtutors.db.seed import seed_subjects
from jtutors.db.session import SessionLocal
from jtutors.logging_config import configure_logging

app = typer.Typer(help="JTutors CLI")
subjects_app = typer.Typer(help="Subject catalog commands")
tutor_app = typer.Typer(help="Tutor profile commands")
admin_app = typer.Typer(help="Admin account commands")

app.add_typer(subjects_app, name="subjects")
app.add_typer(tutor_app, name="tutor")
app.add_typer(admin_app, name="admin")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


@app.command("init")
def init_cmd() -> None:
    """Initialize database, directories, subject catalog and admin settings."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@subjects_app.command("list")
def subjects_list(category: str | None = typer.Option(None, "--category")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        rows = Repository(db).list_subjects(category=category)
        typer.echo(
            json.dumps([{"id": row.id, "name": row.name, "category": row.category} for row in rows], indent=2)
        )


@subjects_app.command("seed")
def subjects_seed() -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        inserted = seed_subjects(db)
        typer.echo(json.dumps({"seeded_subjects": inserted}, indent=2))


@tutor_app.command("list")
def tutor_list(limit: int = typer.Option(20, "--limit")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        rows = Repository(db).list_tutors(limit=limit)
        typer.echo(
            json.dumps(
                [
                    {
                        "id": row.id,
                        "name": f"{row.first_name} {row.last_name}".strip(),
                        "profile_completion": row.profile_completion_percentage,
                        "profile_completed": row.profile_completed,
                    }
                    for row in rows
                ],
                indent=2,
            )
        )


@tutor_app.command("completion")
def tutor_completion(tutor_id: int = typer.Option(..., "--tutor-id")) -> None:
    """Recalculate and print a tutor's profile completion."""
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        if not Repository(db).get_tutor(tutor_id):
            raise typer.BadParameter(f"tutor {tutor_id} not found")
        report = TutorProfileService(db).recalculate(tutor_id)
        typer.echo(json.dumps(report.model_dump(), indent=2))


@admin_app.command("create")
def admin_create(
    email: str = typer.Option(..., "--email"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        try:
            user = AccountService(db).register(email=email, password=password, role="ADMIN")
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        typer.echo(json.dumps({"id": user.id, "email": user.email, "role": user.role}, indent=2))


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
