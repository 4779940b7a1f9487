"""CLI command implementations"""

import json
import logging
import mimetypes
from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from pydantic import ValidationError
from sqlmodel import Session, SQLModel

from guidebook.config import Settings, load_config
from guidebook.core.normalize import normalize
from guidebook.core.render.export import write_export
from guidebook.core.toc import derive_toc, filter_toc
from guidebook.core.uploads import save_image
from guidebook.crud.database import init_db, make_engine
from guidebook.crud.errors import ConflictError, NotFoundError
from guidebook.crud.guides import (
    create_guide, delete_guide, get_guide, get_guide_by_slug, guide_to_dict,
    list_guides, update_guide,
)
from guidebook.crud.models import Guide
from guidebook.crud.schemas import GuideCreate, GuideUpdate, TagCreate, TagUpdate
from guidebook.crud.tags import create_tag, delete_tag, list_tags, tag_to_dict, update_tag


def _fail(msg: str, cause: Exception = None) -> None:
    """Print a user-friendly error to stderr and exit 1."""
    typer.echo(f"Error: {msg}", err=True)
    if cause:
        typer.echo(f"  {cause}", err=True)
    raise typer.Exit(1)


def _settings(overrides: dict = None) -> Settings:
    """Load config with standard CLI error handling."""
    try:
        return load_config(overrides=overrides)
    except ValueError as e:
        _fail(str(e))


def _engine(settings: Settings):
    engine = make_engine(settings.db_url)
    init_db(engine)
    return engine


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2, ensure_ascii=False))


def _read_content(path: Optional[str]) -> Optional[dict]:
    """Load a content JSON file; None when no path was given."""
    if path is None:
        return None
    try:
        content = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        _fail(f"Cannot read content file {path}", e)
    if not isinstance(content, dict):
        _fail(f"Content file {path} must hold a JSON object")
    return content


def _find_guide(session: Session, ref: str) -> Guide:
    """Resolve a guide by id, then by slug."""
    guide = get_guide(session, ref) or get_guide_by_slug(session, ref)
    if guide is None:
        _fail(f"Guide not found: {ref}")
    return guide


def configure(
    log_level: Annotated[Optional[str], typer.Option("--log-level", help="Logging level (DEBUG, INFO, ...)")] = None,
    ):
    """Guide authoring store with block normalization and HTML export."""
    settings = _settings(overrides={"log_level": log_level.upper() if log_level else None})
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")


def init_cmd(
    reset: Annotated[bool, typer.Option("--reset", help="Drop and recreate all tables")] = False,
    ):
    """Initialize database schema. Use --reset to clear existing data."""
    settings = _settings()
    engine = make_engine(settings.db_url)
    if reset:
        SQLModel.metadata.drop_all(engine)
        typer.echo("Existing data cleared.")
    init_db(engine)
    typer.echo(f"Database initialized at: {settings.db_url}")


def guide_create_cmd(
    title: Annotated[str, typer.Argument(help="Guide title")],
    slug: Annotated[Optional[str], typer.Option("--slug", help="URL slug; derived from the title if omitted")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="Short description")] = None,
    content: Annotated[Optional[str], typer.Option("--content", help="Path to a content JSON file")] = None,
    tags: Annotated[Optional[list[str]], typer.Option("--tag", help="Tag id to attach (repeatable)")] = None,
    ):
    """Create a guide."""
    settings = _settings()
    try:
        data = GuideCreate(title=title, slug=slug, description=description, content=_read_content(content))
    except ValidationError as e:
        _fail("Invalid guide", e)
    with Session(_engine(settings)) as session:
        try:
            guide = create_guide(session, data, tag_ids=list(tags or []))
        except (NotFoundError, ConflictError) as e:
            _fail(str(e))
        session.commit()
        typer.echo(f"Created guide {guide.id} ({guide.slug})")


def guide_list_cmd(
    search: Annotated[Optional[str], typer.Option("--search", help="Title substring")] = None,
    tag: Annotated[Optional[str], typer.Option("--tag", help="Only guides with this tag id")] = None,
    ):
    """List guides, newest first."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        guides = list_guides(session, search=search, tag_id=tag)
        if not guides:
            typer.echo("No guides found.")
            return
        for g in guides:
            tag_names = ", ".join(t.name for t in g.tags)
            typer.echo(f"{g.id}  {g.slug}  {g.title}" + (f"  [{tag_names}]" if tag_names else ""))


def guide_show_cmd(
    ref: Annotated[str, typer.Argument(help="Guide id or slug")],
    ):
    """Print a guide with its tags as JSON."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        _echo_json(guide_to_dict(_find_guide(session, ref)))


def guide_update_cmd(
    ref: Annotated[str, typer.Argument(help="Guide id or slug")],
    title: Annotated[Optional[str], typer.Option("--title", help="New title")] = None,
    slug: Annotated[Optional[str], typer.Option("--slug", help="New slug")] = None,
    description: Annotated[Optional[str], typer.Option("--description", help="New description")] = None,
    content: Annotated[Optional[str], typer.Option("--content", help="Path to a content JSON file")] = None,
    tags: Annotated[Optional[list[str]], typer.Option("--tag", help="Replace tags with these ids (repeatable)")] = None,
    clear_tags: Annotated[bool, typer.Option("--clear-tags", help="Remove all tags")] = False,
    ):
    """Update guide fields; tags change only with --tag or --clear-tags."""
    settings = _settings()
    fields = {"title": title, "slug": slug, "description": description, "content": _read_content(content)}
    try:
        data = GuideUpdate(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as e:
        _fail("Invalid guide", e)
    tag_ids = [] if clear_tags else (list(tags) if tags else None)
    with Session(_engine(settings)) as session:
        guide = _find_guide(session, ref)
        try:
            guide = update_guide(session, guide.id, data, tag_ids=tag_ids)
        except (NotFoundError, ConflictError) as e:
            _fail(str(e))
        session.commit()
        typer.echo(f"Updated guide {guide.id} ({guide.slug})")


def guide_delete_cmd(
    ref: Annotated[str, typer.Argument(help="Guide id or slug")],
    ):
    """Delete a guide and its tag associations."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        guide = _find_guide(session, ref)
        delete_guide(session, guide.id)
        session.commit()
    typer.echo(f"Deleted guide {ref}")


def tag_create_cmd(
    name: Annotated[str, typer.Argument(help="Tag name")],
    slug: Annotated[Optional[str], typer.Option("--slug", help="URL slug; derived from the name if omitted")] = None,
    color: Annotated[Optional[str], typer.Option("--color", help="Hex color, e.g. #58a6ff")] = None,
    ):
    """Create a tag."""
    settings = _settings()
    try:
        data = TagCreate(name=name, slug=slug, color=color)
    except ValidationError as e:
        _fail("Invalid tag", e)
    with Session(_engine(settings)) as session:
        try:
            tag = create_tag(session, data, default_color=settings.default_tag_color)
        except ConflictError as e:
            _fail(str(e))
        session.commit()
        typer.echo(f"Created tag {tag.id} ({tag.slug})")


def tag_list_cmd():
    """List tags by name."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        tags = list_tags(session)
        if not tags:
            typer.echo("No tags found.")
            return
        for t in tags:
            typer.echo(f"{t.id}  {t.slug}  {t.name}  {t.color}")


def tag_update_cmd(
    tag_id: Annotated[str, typer.Argument(help="Tag id")],
    name: Annotated[Optional[str], typer.Option("--name", help="New name")] = None,
    slug: Annotated[Optional[str], typer.Option("--slug", help="New slug")] = None,
    color: Annotated[Optional[str], typer.Option("--color", help="New hex color")] = None,
    ):
    """Update tag fields."""
    settings = _settings()
    fields = {"name": name, "slug": slug, "color": color}
    try:
        data = TagUpdate(**{k: v for k, v in fields.items() if v is not None})
    except ValidationError as e:
        _fail("Invalid tag", e)
    with Session(_engine(settings)) as session:
        try:
            tag = update_tag(session, tag_id, data)
        except (NotFoundError, ConflictError) as e:
            _fail(str(e))
        session.commit()
        _echo_json(tag_to_dict(tag))


def tag_delete_cmd(
    tag_id: Annotated[str, typer.Argument(help="Tag id")],
    ):
    """Delete a tag and its guide associations."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        try:
            delete_tag(session, tag_id)
        except NotFoundError as e:
            _fail(str(e))
        session.commit()
    typer.echo(f"Deleted tag {tag_id}")


def toc_cmd(
    ref: Annotated[str, typer.Argument(help="Guide id or slug")],
    search: Annotated[Optional[str], typer.Option("--search", help="Filter sections by text")] = None,
    ):
    """Print a guide's table of contents."""
    settings = _settings()
    with Session(_engine(settings)) as session:
        document = normalize(_find_guide(session, ref).content)
    entries = filter_toc(derive_toc(document), search or "")
    if not entries:
        typer.echo("No sections found." if search else "No sections available.")
        return
    for e in entries:
        typer.echo(f"{'  ' * (e.level - 1)}{e.text}  #{e.anchor_id}")


def normalize_cmd(
    path: Annotated[str, typer.Argument(help="Content JSON file to normalize")],
    ):
    """Print the normalized form of a content JSON file."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        _fail(f"Cannot read {path}", e)
    _echo_json(normalize(raw).to_content())


def export_cmd(
    ref: Annotated[str, typer.Argument(help="Guide id or slug")],
    out: Annotated[Optional[str], typer.Option("--out-dir", help="Output directory")] = None,
    ):
    """Write a guide as a standalone HTML file."""
    settings = _settings(overrides={"output_dir": out})
    with Session(_engine(settings)) as session:
        guide = _find_guide(session, ref)
        try:
            path = write_export(guide, Path(settings.output_dir), site_name=settings.site_name)
        except OSError as e:
            _fail("Export failed", e)
    typer.echo(f"  {ref} -> {path}")


def upload_cmd(
    path: Annotated[str, typer.Argument(help="Image file to upload")],
    ):
    """Store an image in the upload directory and print the upload response."""
    settings = _settings()
    file = Path(path)
    try:
        data = file.read_bytes()
    except OSError as e:
        _fail(f"Cannot read {path}", e)
    content_type, _ = mimetypes.guess_type(file.name)
    result = save_image(
        data, file.name, content_type, Path(settings.upload_dir),
        max_bytes=settings.max_upload_bytes, url_prefix=settings.upload_url_prefix,
    )
    _echo_json(result)
    if not result["success"]:
        raise typer.Exit(1)
