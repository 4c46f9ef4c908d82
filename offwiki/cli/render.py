"""CLI command for rendering one article to HTML."""

from pathlib import Path

import click

from offwiki.cli.utils import load_index, require_one_selector
from offwiki.ingestion.pipeline import ArticlePipeline
from offwiki.rendering.context import RenderMode
from offwiki.rendering.html_renderer import HtmlRenderer, wrap_document
from offwiki.utils.config import Config
from offwiki.utils.exceptions import LookupMiss, MarkupParseWarning, OffwikiError
from offwiki.utils.logger import get_logger

logger = get_logger(__name__, component="cli")


@click.command()
@click.option("--title", help="Exact article title")
@click.option("--id", "record_id", type=int, help="Page id")
@click.option(
    "--index",
    "index_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Multistream index file (default: $OFFWIKI_INDEX_PATH)",
)
@click.option(
    "--dump",
    "dump_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Multistream dump file (default: $OFFWIKI_DUMP_PATH)",
)
@click.option(
    "--output",
    "-o",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write HTML to this file instead of stdout",
)
@click.option("--inline", is_flag=True, help="Keep citations inline instead of as footnotes")
@click.option("--raw", is_flag=True, help="Omit the title/timestamp header")
@click.option("--standalone", is_flag=True, help="Wrap the output in a complete HTML page")
@click.option("--strict", is_flag=True, help="Fail on markup parser warnings")
def render(
    title: str | None,
    record_id: int | None,
    index_path: Path | None,
    dump_path: Path | None,
    output: Path | None,
    inline: bool,
    raw: bool,
    standalone: bool,
    strict: bool,
) -> None:
    """Render one article from an offline dump as HTML."""
    require_one_selector(title, record_id)
    config = Config()

    try:
        index = load_index(config, index_path)
        pipeline = ArticlePipeline(
            index=index,
            dump_path=config.resolve_dump_path(dump_path),
            renderer=HtmlRenderer(link_prefix=config.link_prefix),
            strict_markup=strict or config.strict_markup,
        )
        article = pipeline.render_article(
            title=title,
            record_id=record_id,
            mode=RenderMode.INLINE if inline else RenderMode.WITH_FOOTNOTES,
            formatted=not raw,
        )
    except LookupMiss as e:
        click.echo(f"Error: {e.message}", err=True)
        raise click.Abort() from None
    except MarkupParseWarning as e:
        click.echo(f"Error: {e}", err=True)
        for warning in e.warnings:
            click.echo(f"  {warning}", err=True)
        raise click.Abort() from e
    except (OffwikiError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        logger.error("render_failed", title=title, record_id=record_id, error=str(e))
        raise click.Abort() from e

    html = article.html
    if standalone:
        html = wrap_document(article.record.title, html)

    if output is None:
        click.echo(html)
    else:
        output.write_text(html, encoding="utf-8")
        click.echo(f"Wrote {article.record.title!r} to {output}", err=True)


if __name__ == "__main__":
    render()
