import click
from pathlib import Path

from .config import Config
from .detail_cache import DisplayMode
from .errors import StoryError
from .settings import AVAILABLE_LANGUAGES, LEVEL_KEYS, language_by_id
from .utils.display import (
    click_table,
    create_console,
    phrase_table,
    sentence_panel,
    settings_panel,
    status_line,
)
from .utils.logger import setup_logger


@click.group()
@click.option('--config', '-c', type=click.Path(dir_okay=False), default='config.yaml',
              help='Path to configuration file')
@click.option('--verbose', '-v', is_flag=True, help='Enable verbose logging')
@click.pass_context
def cli(ctx: click.Context, config: str, verbose: bool):
    """Phrase Stories - graded short stories for Chinese and Japanese learners."""
    ctx.ensure_object(dict)

    config_path = Path(config)
    if config_path.exists():
        ctx.obj['config'] = Config.from_yaml(config_path)
    else:
        ctx.obj['config'] = Config()

    log_level = "DEBUG" if verbose else ctx.obj['config'].log_level
    logger = setup_logger(log_level, ctx.obj['config'].log_file, client_level="INFO" if verbose else "WARNING")
    ctx.obj['logger'] = logger
    ctx.obj['console'] = create_console()

    if config_path.exists():
        logger.debug(f"Config loaded from: {config_path}")


def _orchestrator(ctx: click.Context):
    if 'orchestrator' not in ctx.obj:
        from .orchestrator import StoryOrchestrator
        ctx.obj['orchestrator'] = StoryOrchestrator(ctx.obj['config'])
    return ctx.obj['orchestrator']


def _require_phrase(orchestrator, index: int):
    if orchestrator.phrases.is_empty:
        orchestrator.phrases.restore()
    phrase = orchestrator.phrase(index)
    if phrase is None:
        raise click.ClickException(f"No phrase with index {index}")
    return phrase


def _mode(sentence: bool) -> DisplayMode:
    return DisplayMode.SENTENCE if sentence else DisplayMode.PHRASE


def _finish_cycle(ctx: click.Context, ok: bool):
    orchestrator = _orchestrator(ctx)
    console = ctx.obj['console']
    snapshot = orchestrator.state.snapshot
    if not ok:
        raise click.ClickException(snapshot.diagnostic or "Another story operation is running")
    console.print(phrase_table(orchestrator.phrases, orchestrator.settings.selected_language))
    if snapshot.diagnostic:
        console.print(f"[yellow]Warning:[/yellow] {snapshot.diagnostic}")


@cli.command()
@click.option('--new-thread', is_flag=True, help='Do not reuse the saved conversation thread')
@click.pass_context
def init(ctx: click.Context, new_thread: bool):
    """Create the planner and writer personas."""
    orchestrator = _orchestrator(ctx)
    if not orchestrator.initialize_session(overwrite_thread=new_thread):
        raise click.ClickException(orchestrator.state.snapshot.diagnostic or "Initialization failed")
    ctx.obj['console'].print(status_line(orchestrator.state.snapshot))


@cli.command()
@click.pass_context
def generate(ctx: click.Context):
    """Plan and write a new story."""
    orchestrator = _orchestrator(ctx)
    with ctx.obj['console'].status("Writing a new story..."):
        ok = orchestrator.generate()
    _finish_cycle(ctx, ok)


@cli.command('continue')
@click.pass_context
def continue_story(ctx: click.Context):
    """Write the next chapter of the current story."""
    orchestrator = _orchestrator(ctx)
    with ctx.obj['console'].status("Continuing the story..."):
        ok = orchestrator.continue_story()
    _finish_cycle(ctx, ok)


@cli.command()
@click.pass_context
def resume(ctx: click.Context):
    """Load the last story, recovering it from the thread if needed."""
    orchestrator = _orchestrator(ctx)
    _finish_cycle(ctx, orchestrator.resume_story())


@cli.command()
@click.pass_context
def show(ctx: click.Context):
    """Print the saved story."""
    orchestrator = _orchestrator(ctx)
    if orchestrator.phrases.restore() is None:
        raise click.ClickException("No saved story, run 'generate' first")
    ctx.obj['console'].print(phrase_table(orchestrator.phrases, orchestrator.settings.selected_language))


@cli.command()
@click.argument('index', type=int)
@click.pass_context
def sentence(ctx: click.Context, index: int):
    """Show the sentence containing phrase INDEX."""
    orchestrator = _orchestrator(ctx)
    phrase = _require_phrase(orchestrator, index)
    view = orchestrator.sentence_view(phrase)
    ctx.obj['console'].print(sentence_panel(view, orchestrator.settings.selected_language))


@cli.command('click')
@click.argument('index', type=int)
@click.pass_context
def click_phrase(ctx: click.Context, index: int):
    """Record a click on phrase INDEX and show its sentence."""
    orchestrator = _orchestrator(ctx)
    phrase = _require_phrase(orchestrator, index)
    view = orchestrator.select_phrase(phrase)
    ctx.obj['console'].print(sentence_panel(view, orchestrator.settings.selected_language))


@cli.command()
@click.argument('index', type=int)
@click.option('--sentence', 'whole_sentence', is_flag=True, help='Explain the whole sentence')
@click.pass_context
def detail(ctx: click.Context, index: int, whole_sentence: bool):
    """Detailed translation of phrase INDEX."""
    orchestrator = _orchestrator(ctx)
    phrase = _require_phrase(orchestrator, index)
    try:
        text = orchestrator.detailed_translation(phrase, _mode(whole_sentence))
    except StoryError as e:
        raise click.ClickException(str(e))
    click.echo(text)


@cli.command()
@click.argument('index', type=int)
@click.option('--sentence', 'whole_sentence', is_flag=True, help='Speak the whole sentence')
@click.pass_context
def speak(ctx: click.Context, index: int, whole_sentence: bool):
    """Synthesize audio for phrase INDEX and print the mp3 path."""
    orchestrator = _orchestrator(ctx)
    phrase = _require_phrase(orchestrator, index)
    try:
        path = orchestrator.audio_for(phrase, _mode(whole_sentence))
    except StoryError as e:
        raise click.ClickException(str(e))
    click.echo(str(path))


@cli.command()
@click.option('--reset', is_flag=True, help='Forget all click counts')
@click.pass_context
def clicks(ctx: click.Context, reset: bool):
    """Show per-character click counts."""
    orchestrator = _orchestrator(ctx)
    console = ctx.obj['console']
    if reset:
        orchestrator.reset_clicks()
        console.print("Click counts reset")
        return
    console.print(click_table(orchestrator.engagement.ranked()))
    difficult = orchestrator.difficult_characters()
    if difficult:
        console.print(f"Most difficult: {' '.join(difficult)}")


@cli.command()
@click.option('--language', type=click.Choice([lang.id for lang in AVAILABLE_LANGUAGES]), help='Target language')
@click.option('--level', type=click.Choice(LEVEL_KEYS), help='CEFR level')
@click.option('--genre', 'genres', multiple=True, help='Story genre (repeatable)')
@click.option('--tone', help='Story tone')
@click.option('--conflict', help='Conflict type')
@click.option('--time-period', help='Time period')
@click.option('--request', 'custom_request', help='Free-form request for the planner')
@click.pass_context
def settings(ctx: click.Context, language, level, genres, tone, conflict, time_period, custom_request):
    """Show or change story settings."""
    orchestrator = _orchestrator(ctx)
    updates = {}
    if language:
        updates['selected_language'] = language_by_id(language)
    if level:
        updates['language_level'] = level
    if genres:
        updates['selected_genres'] = list(genres)
    if tone is not None:
        updates['selected_tone'] = tone
    if conflict is not None:
        updates['selected_conflict'] = conflict
    if time_period is not None:
        updates['selected_time_period'] = time_period
    if custom_request is not None:
        updates['custom_request'] = custom_request

    if updates:
        try:
            orchestrator.save_settings(orchestrator.settings.model_copy(update=updates))
        except StoryError as e:
            raise click.ClickException(str(e))
    ctx.obj['console'].print(settings_panel(orchestrator.settings))


def main():
    cli()

if __name__ == '__main__':
    main()
