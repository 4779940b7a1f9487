"""CLI entrypoint: Typer app definition and command registration"""

import typer

from guidebook.cli.commands import (
    configure, export_cmd, guide_create_cmd, guide_delete_cmd, guide_list_cmd,
    guide_show_cmd, guide_update_cmd, init_cmd, normalize_cmd, tag_create_cmd,
    tag_delete_cmd, tag_list_cmd, tag_update_cmd, toc_cmd, upload_cmd,
)


app = typer.Typer(name="guidebook", no_args_is_help=True, help="Guide authoring with block content and HTML export")

app.callback()(configure)
app.command(name="init")(init_cmd)
app.command(name="guide-create")(guide_create_cmd)
app.command(name="guide-list")(guide_list_cmd)
app.command(name="guide-show")(guide_show_cmd)
app.command(name="guide-update")(guide_update_cmd)
app.command(name="guide-delete")(guide_delete_cmd)
app.command(name="tag-create")(tag_create_cmd)
app.command(name="tag-list")(tag_list_cmd)
app.command(name="tag-update")(tag_update_cmd)
app.command(name="tag-delete")(tag_delete_cmd)
app.command(name="toc")(toc_cmd)
app.command(name="normalize")(normalize_cmd)
app.command(name="export")(export_cmd)
app.command(name="upload")(upload_cmd)
