"""ABOUTME: CLI entry point for dunspars commands.
ABOUTME: Provides setup, lookup, match, coverage, resource, config and custom commands via Typer."""

from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from dunspars.app.queries import Store, open_store
from dunspars.app.resolvers import (
    evolution_tree_of,
    resolve_ability,
    resolve_custom_pokemon,
    resolve_move,
    resolve_move_list,
    resolve_pokemon,
    resolve_type,
)
from dunspars.app.tools.coverage import MAX_ROSTER_SIZE, coverage_report
from dunspars.app.tools.matchup import matchup_report
from dunspars.app.validation import validate_name
from dunspars.build import run_setup_pipeline
from dunspars.config import (
    CustomPokemon,
    UserConfig,
    load_custom_collection,
    load_user_config,
    save_custom_collection,
    set_config_value,
    unset_config_value,
)
from dunspars.display import (
    render_ability,
    render_coverage,
    render_evolution,
    render_learn_moves,
    render_matchup,
    render_move,
    render_pokemon,
    render_types,
)
from dunspars.errors import DunsparsError
from dunspars.logs import init_logging
from dunspars.models import Pokemon
from dunspars.settings import settings
from dunspars.utils.generation import GenerationResolver
from dunspars.utils.type_chart import TYPES

app = typer.Typer(
    name="dunspars",
    help="Pokemon reference tool: Pokemon, moves, types and matchups as of any game.",
    no_args_is_help=True,
)

custom_app = typer.Typer(help="Manage custom Pokemon with nicknames, chosen moves and types.", no_args_is_help=True)
app.add_typer(custom_app, name="custom")

console = Console()


@dataclass
class CliState:
    """Global options shared by every command."""

    game: str | None
    console: Console


@contextmanager
def _handle_errors(out: Console) -> Iterator[None]:
    """Print expected failures and exit with status 1."""
    try:
        yield
    except KeyError as e:
        out.print(f"[red]Error:[/] {escape(str(e.args[0]) if e.args else str(e))}")
        raise typer.Exit(1) from None
    except (DunsparsError, FileNotFoundError, ValueError) as e:
        out.print(f"[red]Error:[/] {escape(str(e))}")
        raise typer.Exit(1) from None


def _make_console(color: bool | None) -> Console:
    if color is None:
        color = load_user_config().color
    if color is None:
        return Console()
    if color:
        return Console(force_terminal=True)
    return Console(color_system=None, highlight=False)


@app.callback()
def main(
    ctx: typer.Context,
    game: str | None = typer.Option(None, "--game", "-g", help="Game (version group) to resolve data for"),
    color: bool | None = typer.Option(None, "--color/--no-color", help="Force colored output on or off"),
    debug: bool = typer.Option(False, "--debug", help="Log debug output to stderr"),
) -> None:
    """Pokemon reference tool backed by a local copy of PokeAPI."""
    if settings.logging_config_path.exists():
        init_logging(settings.logging_config_path, "DEBUG" if debug else None)
    with _handle_errors(console):
        ctx.obj = CliState(game=game, console=_make_console(color))


def _state(ctx: typer.Context) -> CliState:
    if ctx.obj is None:
        ctx.obj = CliState(game=None, console=console)
    return ctx.obj


def _generation(state: CliState, store: Store) -> int:
    """Resolve the selected game's generation: --game, then config, then the latest game."""
    resolver = GenerationResolver.from_connection(store.conn)
    game = state.game or load_user_config().game
    if game is None:
        game = resolver.latest_game()
    game = validate_name(game, resolver.games, "game")
    return resolver.generation_of_game(game)


def _resolve_pokemon_arg(name: str, generation: int, store: Store) -> Pokemon:
    """Resolve a custom Pokemon by nickname, otherwise a database Pokemon by name."""
    custom = load_custom_collection().find(name)
    if custom is not None:
        return resolve_custom_pokemon(custom, store)
    validated = validate_name(name, store.select_all_names("pokemon"), "pokemon")
    return resolve_pokemon(validated, generation, store)


def _check_roster_size(names: list[str], label: str) -> None:
    if not 1 <= len(names) <= MAX_ROSTER_SIZE:
        raise ValueError(f"{label} takes 1 to {MAX_ROSTER_SIZE} Pokemon, got {len(names)}")


@app.command()
def setup(
    ctx: typer.Context,
    force: bool = typer.Option(False, "--force", "-f", help="Re-download cached responses and rebuild"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show detailed output"),
) -> None:
    """Fetch data from PokeAPI and build the local database."""
    out = _state(ctx).console

    if settings.db_path.exists() and not force:
        out.print(f"[yellow]Database already exists at {settings.db_path}.[/] Use --force to rebuild it.")
        return

    def log(msg: str) -> None:
        if verbose:
            out.print(f"[blue]{msg}[/]")

    with _handle_errors(out):
        try:
            db_path = run_setup_pipeline(force=force, verbose_callback=log)
        except httpx.HTTPError as e:
            out.print(f"[red]Setup failed:[/] {escape(str(e))}")
            raise typer.Exit(1) from None
    out.print(f"[green]Database built successfully:[/] {db_path}")


@app.command()
def pokemon(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Pokemon name or custom nickname"),
    moves: bool = typer.Option(False, "--moves", "-m", help="List learnable moves"),
    evolution: bool = typer.Option(False, "--evolution", "-e", help="Show the evolution family"),
) -> None:
    """Show a Pokemon's types, abilities, stats and weaknesses."""
    state = _state(ctx)
    out = state.console
    with _handle_errors(out), open_store() as store:
        generation = _generation(state, store)
        mon = _resolve_pokemon_arg(name, generation, store)
        out.print(render_pokemon(mon))

        if moves:
            names = dict.fromkeys(m.name for m in mon.learn_moves)
            resolved = {n: resolve_move(n, mon.generation, store) for n in names}
            out.print()
            out.print(render_learn_moves(mon, resolved))

        if evolution:
            out.print()
            out.print(render_evolution(evolution_tree_of(mon.species, store)))


@app.command("type")
def type_(
    ctx: typer.Context,
    primary: str = typer.Argument(..., help="Type name"),
    secondary: str | None = typer.Argument(None, help="Optional second type for a dual-type defense chart"),
) -> None:
    """Show offense and defense charts for one or two types."""
    state = _state(ctx)
    out = state.console
    with _handle_errors(out), open_store() as store:
        generation = _generation(state, store)
        type_names = store.select_all_names("types")
        requested = [primary] if secondary is None else [primary, secondary]
        types = [resolve_type(validate_name(t, type_names, "type"), generation, store) for t in requested]
        out.print(render_types(types))


@app.command()
def move(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Move name"),
) -> None:
    """Show a move's power, accuracy, pp and effect."""
    state = _state(ctx)
    out = state.console
    with _handle_errors(out), open_store() as store:
        generation = _generation(state, store)
        validated = validate_name(name, store.select_all_names("moves"), "move")
        out.print(render_move(resolve_move(validated, generation, store)))


@app.command()
def ability(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Ability name"),
) -> None:
    """Show an ability's effect."""
    state = _state(ctx)
    out = state.console
    with _handle_errors(out), open_store() as store:
        generation = _generation(state, store)
        validated = validate_name(name, store.select_all_names("abilities"), "ability")
        out.print(render_ability(resolve_ability(validated, generation, store)))


@app.command("match")
def match_(
    ctx: typer.Context,
    defenders: list[str] = typer.Argument(..., help="One to six defending Pokemon"),
    attacker: str = typer.Argument(..., help="Attacking Pokemon"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show every effectiveness tier"),
    stab_only: bool = typer.Option(False, "--stab-only", "-s", help="Only moves sharing a type with the user"),
) -> None:
    """Compare an attacker's moves against each defender and back."""
    state = _state(ctx)
    out = state.console
    with _handle_errors(out), open_store() as store:
        _check_roster_size(defenders, "match")
        generation = _generation(state, store)
        attacking = _resolve_pokemon_arg(attacker, generation, store)
        for i, name in enumerate(defenders):
            defending = _resolve_pokemon_arg(name, generation, store)
            report = matchup_report(attacking, defending, store, verbose=verbose, stab_only=stab_only)
            if i:
                out.print()
            out.print(render_matchup(report))


@app.command()
def coverage(
    ctx: typer.Context,
    names: list[str] = typer.Argument(..., help="One to six Pokemon"),
) -> None:
    """Show which types a team hits super-effectively and which it resists."""
    state = _state(ctx)
    out = state.console
    with _handle_errors(out), open_store() as store:
        _check_roster_size(names, "coverage")
        generation = _generation(state, store)
        roster = [_resolve_pokemon_arg(name, generation, store) for name in names]
        out.print(render_coverage(coverage_report(roster, store)))


@app.command()
def resource(
    ctx: typer.Context,
    kind: str = typer.Argument(..., help="One of: pokemon, moves, abilities, types, games"),
    delimiter: str = typer.Option("\n", "--delimiter", "-d", help="Separator between names"),
) -> None:
    """List every name of a resource, e.g. for shell completion."""
    out = _state(ctx).console
    with _handle_errors(out), open_store() as store:
        names = store.select_all_names(kind)
    typer.echo(delimiter.join(names))


@app.command("config")
def config_(
    ctx: typer.Context,
    key: str = typer.Argument(..., help=f"One of: {', '.join(UserConfig.keys())}"),
    value: str | None = typer.Argument(None, help="New value; omit to show the current value"),
    unset: bool = typer.Option(False, "--unset", "-u", help="Remove the key"),
) -> None:
    """Show, set or unset a persistent setting."""
    out = _state(ctx).console
    with _handle_errors(out):
        if unset:
            unset_config_value(key)
            out.print(f"[green]Unset[/] {key}")
        elif value is None:
            if key not in UserConfig.keys():
                raise KeyError(f"Unknown config key '{key}'. Valid keys: {', '.join(UserConfig.keys())}")
            current = getattr(load_user_config(), key)
            out.print("[dim]not set[/]" if current is None else str(current))
        else:
            updated = set_config_value(key, value)
            out.print(f"[green]Set[/] {key} = {getattr(updated, key)}")


@custom_app.command("add")
def custom_add(
    ctx: typer.Context,
    nickname: str = typer.Argument(..., help="Name to refer to the custom Pokemon by"),
    base: str = typer.Argument(..., help="Existing Pokemon it is based on"),
    move_names: list[str] = typer.Option([], "--move", "-m", help="Chosen move (repeatable, up to four)"),
    type_names: list[str] = typer.Option([], "--type", "-t", help="Replacement type (repeatable, up to two)"),
) -> None:
    """Add or replace a custom Pokemon, resolved as of the selected game."""
    state = _state(ctx)
    out = state.console
    with _handle_errors(out), open_store() as store:
        generation = _generation(state, store)
        base_name = validate_name(base, store.select_all_names("pokemon"), "pokemon")
        move_list = store.select_all_names("moves")
        type_list = store.select_all_names("types")
        custom = CustomPokemon(
            nickname=nickname,
            base=base_name,
            generation=generation,
            moves=[validate_name(m, move_list, "move") for m in move_names],
            types=[validate_name(t, type_list, "type") for t in type_names] or None,
        )
        pokemon = resolve_custom_pokemon(custom, store)
        # Chosen moves must exist in the custom generation and have a charted type
        if custom.moves:
            for move in resolve_move_list(pokemon, store):
                if move.type not in TYPES:
                    raise ValueError(f"Move '{move.name}' has type '{move.type}', which has no type chart")

        collection = load_custom_collection()
        collection.add(custom)
        save_custom_collection(collection)
    out.print(f"[green]Saved[/] {nickname} ({base_name}, gen-{generation})")


@custom_app.command("remove")
def custom_remove(
    ctx: typer.Context,
    nickname: str = typer.Argument(..., help="Nickname of the custom Pokemon"),
) -> None:
    """Remove a custom Pokemon."""
    out = _state(ctx).console
    with _handle_errors(out):
        collection = load_custom_collection()
        if not collection.remove(nickname):
            raise KeyError(f"Custom Pokemon '{nickname}' not found")
        save_custom_collection(collection)
    out.print(f"[green]Removed[/] {nickname}")


@custom_app.command("list")
def custom_list(ctx: typer.Context) -> None:
    """List custom Pokemon."""
    out = _state(ctx).console
    with _handle_errors(out):
        collection = load_custom_collection()
    if not collection.pokemon:
        out.print("[dim]No custom Pokemon[/]")
        return
    for custom in collection.pokemon:
        types = f" [{'/'.join(custom.types)}]" if custom.types else ""
        moves = ", ".join(custom.moves) or "learnable moves"
        name = escape(custom.nickname)
        out.print(f"[bold]{name}[/] ({custom.base}, gen-{custom.generation}){escape(types)}: {moves}")


if __name__ == "__main__":
    app()
