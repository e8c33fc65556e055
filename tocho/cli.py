"""Command line interface for the Tocho Prime league administration."""
from __future__ import annotations

import argparse
import logging
import shlex
import sys
from datetime import date
from pathlib import Path
from typing import Callable, List, Optional

from . import __version__, models, services
from .errors import GatewayError, ValidationError
from .gateway import LeagueGateway

log = logging.getLogger(__name__)

DATE_HELP = "Formato ISO (AAAA-MM-DD)."
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def parse_date(value: Optional[str]) -> Optional[date]:
    if value is None:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise ValidationError(f"Fecha inválida: {value}") from exc


def _season_line(season: models.Season) -> str:
    start = season.start_date.isoformat() if season.start_date else "-"
    end = season.end_date.isoformat() if season.end_date else "-"
    return f"- [{season.id}] {season.name} | {season.status} | {start} a {end}"


def _configure_season_commands(subparsers: argparse._SubParsersAction, gateway: LeagueGateway) -> None:
    season_parser = subparsers.add_parser("seasons", help="Gestionar temporadas")
    season_sub = season_parser.add_subparsers(dest="seasons_command", required=True)

    list_seasons = season_sub.add_parser("list", help="Listar temporadas")

    def handle_list(_: argparse.Namespace) -> None:
        seasons = services.LeagueStructure(gateway).list_seasons()
        if not seasons:
            print("Sin temporadas registradas.")
            return
        for season in seasons:
            print(_season_line(season))

    list_seasons.set_defaults(func=handle_list)

    add_season = season_sub.add_parser("add", help="Crear temporada")
    add_season.add_argument("name", help="Nombre de la temporada")
    add_season.add_argument("--start", help=DATE_HELP)
    add_season.add_argument("--end", help=DATE_HELP)
    add_season.add_argument("--status", default="upcoming", choices=models.SEASON_STATUSES)
    add_season.add_argument("--description", default="", help="Descripción")

    def handle_add(args: argparse.Namespace) -> None:
        season = services.LeagueStructure(gateway).create_season(
            name=args.name,
            start_date=parse_date(args.start),
            end_date=parse_date(args.end),
            status=args.status,
            description=args.description,
        )
        print("Temporada creada:")
        print(_season_line(season))

    add_season.set_defaults(func=handle_add)

    archive = season_sub.add_parser("archive", help="Archivar temporada")
    archive.add_argument("season_id", help="ID de la temporada")

    def handle_archive(args: argparse.Namespace) -> None:
        season = services.LeagueStructure(gateway).archive_season(args.season_id)
        print(f"Temporada archivada: {season.name}")

    archive.set_defaults(func=handle_archive)

    duplicate = season_sub.add_parser("duplicate", help="Duplicar temporada con sus divisiones y categorías")
    duplicate.add_argument("season_id", help="ID de la temporada de origen")
    duplicate.add_argument("--name", help="Nombre de la copia")

    def handle_duplicate(args: argparse.Namespace) -> None:
        season = services.LeagueStructure(gateway).duplicate_season(args.season_id, args.name)
        print("Temporada duplicada:")
        print(_season_line(season))

    duplicate.set_defaults(func=handle_duplicate)


def _configure_division_commands(subparsers: argparse._SubParsersAction, gateway: LeagueGateway) -> None:
    division_parser = subparsers.add_parser("divisions", help="Gestionar divisiones")
    division_sub = division_parser.add_subparsers(dest="divisions_command", required=True)

    list_divisions = division_sub.add_parser("list", help="Listar divisiones de una temporada")
    list_divisions.add_argument("season_id", help="ID de la temporada")

    def handle_list(args: argparse.Namespace) -> None:
        divisions = services.LeagueStructure(gateway).list_divisions(args.season_id)
        if not divisions:
            print("Sin divisiones en esta temporada.")
            return
        for division in divisions:
            print(f"- [{division.id}] {division.name} | orden {division.order} | {division.color}")

    list_divisions.set_defaults(func=handle_list)

    add_division = division_sub.add_parser("add", help="Crear división")
    add_division.add_argument("season_id", help="ID de la temporada")
    add_division.add_argument("name", help="Nombre de la división")
    add_division.add_argument("--color", default="#3b82f6", help="Color en hexadecimal")
    add_division.add_argument("--order", type=int, default=0, help="Orden de presentación")
    add_division.add_argument("--description", default="", help="Descripción")

    def handle_add(args: argparse.Namespace) -> None:
        gateway.get_season_by_id(args.season_id)
        division = services.LeagueStructure(gateway).create_division(
            args.season_id, args.name, color=args.color, description=args.description, order=args.order
        )
        print(f"División creada: [{division.id}] {division.name}")

    add_division.set_defaults(func=handle_add)

    defaults = division_sub.add_parser("defaults", help="Crear las divisiones Varonil, Femenil y Mixto")
    defaults.add_argument("season_id", help="ID de la temporada")

    def handle_defaults(args: argparse.Namespace) -> None:
        structure = services.LeagueStructure(gateway)
        if not structure.can_create_default_divisions(args.season_id):
            print("La temporada ya tiene divisiones; no se crearon las predeterminadas.")
            return
        created = structure.create_default_divisions(args.season_id)
        print(f"Divisiones creadas: {', '.join(division.name for division in created)}")

    defaults.set_defaults(func=handle_defaults)


def _configure_category_commands(subparsers: argparse._SubParsersAction, gateway: LeagueGateway) -> None:
    category_parser = subparsers.add_parser("categories", help="Gestionar categorías")
    category_sub = category_parser.add_subparsers(dest="categories_command", required=True)

    list_categories = category_sub.add_parser("list", help="Listar categorías de una división")
    list_categories.add_argument("division_id", help="ID de la división")

    def handle_list(args: argparse.Namespace) -> None:
        categories = services.CategoryManager(gateway).list_by_division(args.division_id)
        if not categories:
            print("Sin categorías en esta división.")
            return
        for category in categories:
            print(
                f"- [{category.id}] {category.name} | nivel {category.level} | ${category.price:.2f} | "
                f"equipos máx. {category.team_limit} | jugadores máx. {category.player_limit}"
            )

    list_categories.set_defaults(func=handle_list)

    defaults = category_sub.add_parser("defaults", help="Crear las categorías A-G")
    defaults.add_argument("division_id", help="ID de la división")

    def handle_defaults(args: argparse.Namespace) -> None:
        division = gateway.get_division_by_id(args.division_id)
        manager = services.CategoryManager(gateway)
        if not manager.can_create_default_set(division.id):
            print("La división ya tiene categorías; no se crearon las predeterminadas.")
            return
        created = manager.create_default_set(division.id, division.season_id)
        print(f"Categorías creadas: {', '.join(category.name for category in created)}")

    defaults.set_defaults(func=handle_defaults)


def _configure_field_commands(subparsers: argparse._SubParsersAction, gateway: LeagueGateway) -> None:
    field_parser = subparsers.add_parser("fields", help="Gestionar campos")
    field_sub = field_parser.add_subparsers(dest="fields_command", required=True)

    list_fields = field_sub.add_parser("list", help="Listar campos")
    list_fields.add_argument("--search", help="Buscar por código, nombre o dirección")
    list_fields.add_argument("--status", choices=models.FIELD_STATUSES)
    list_fields.add_argument("--type", dest="field_type", choices=models.FIELD_TYPES)

    def handle_list(args: argparse.Namespace) -> None:
        board = services.FieldBoard(gateway)
        board.list()
        if board.using_fallback:
            print("Sin campos registrados; mostrando el catálogo predeterminado.")
        for item in board.filter(args.search, args.status, args.field_type):
            print(
                f"- [{item.id}] {item.code} | {item.name} | {item.type} | {item.status} | "
                f"prioridad {item.priority} | zona {item.zone}"
            )

    list_fields.set_defaults(func=handle_list)

    seed = field_sub.add_parser("seed", help="Registrar los 16 campos predeterminados")

    def handle_seed(_: argparse.Namespace) -> None:
        if gateway.get_fields():
            print("Ya existen campos registrados; no se crearon los predeterminados.")
            return
        created = gateway.create_default_fields()
        print(f"{len(created)} campos registrados.")

    seed.set_defaults(func=handle_seed)


def _configure_team_commands(subparsers: argparse._SubParsersAction, gateway: LeagueGateway) -> None:
    team_parser = subparsers.add_parser("teams", help="Gestionar equipos")
    team_sub = team_parser.add_subparsers(dest="teams_command", required=True)

    list_teams = team_sub.add_parser("list", help="Listar equipos")
    list_teams.add_argument("--category", dest="category_id", help="Filtrar por categoría")
    list_teams.add_argument("--status", choices=models.TEAM_STATUSES, help="Filtrar por estado")
    list_teams.add_argument(
        "--payment", dest="payment_status", choices=models.TEAM_PAYMENT_STATUSES, help="Filtrar por estado de pago"
    )

    def handle_list(args: argparse.Namespace) -> None:
        teams = services.LeagueStructure(gateway).list_teams(
            args.category_id, status=args.status, payment_status=args.payment_status
        )
        if not teams:
            print("Sin equipos registrados.")
            return
        for team in teams:
            print(f"- {services.format_team(team)}")

    list_teams.set_defaults(func=handle_list)

    add_team = team_sub.add_parser("add", help="Inscribir equipo")
    add_team.add_argument("name", help="Nombre del equipo")
    add_team.add_argument("category_id", help="ID de la categoría")
    add_team.add_argument("--short-name", dest="short_name", default="", help="Nombre corto")
    add_team.add_argument("--coach", default="", help="Nombre del entrenador")

    def handle_add(args: argparse.Namespace) -> None:
        team = services.LeagueStructure(gateway).create_team(
            args.name,
            args.category_id,
            short_name=args.short_name,
            coach=models.Coach(name=args.coach),
        )
        print("Equipo inscrito:")
        print(f"  {services.format_team(team)}")

    add_team.set_defaults(func=handle_add)

    team_status = team_sub.add_parser("status", help="Cambiar el estado de un equipo")
    team_status.add_argument("team_id", help="ID del equipo")
    team_status.add_argument("status", choices=models.TEAM_STATUSES)

    def handle_status(args: argparse.Namespace) -> None:
        team = services.LeagueStructure(gateway).update_team_status(args.team_id, args.status)
        print(f"Estado de {team.name}: {team.status}")

    team_status.set_defaults(func=handle_status)

    payment_status = team_sub.add_parser("payment-status", help="Fijar el estado de pago de un equipo")
    payment_status.add_argument("team_id", help="ID del equipo")
    payment_status.add_argument("payment_status", choices=models.TEAM_PAYMENT_STATUSES)

    def handle_payment_status(args: argparse.Namespace) -> None:
        team = services.LeagueStructure(gateway).set_payment_status(args.team_id, args.payment_status)
        print(f"Estado de pago de {team.name}: {team.payment_status}")

    payment_status.set_defaults(func=handle_payment_status)


def _configure_payment_commands(subparsers: argparse._SubParsersAction, gateway: LeagueGateway) -> None:
    payment_parser = subparsers.add_parser("payments", help="Registrar pagos")
    payment_sub = payment_parser.add_subparsers(dest="payments_command", required=True)

    add_payment = payment_sub.add_parser("add", help="Registrar un pago de inscripción")
    add_payment.add_argument("team_id", help="ID del equipo")
    add_payment.add_argument("amount", type=float, help="Monto")
    add_payment.add_argument("--date", dest="payment_date", help=DATE_HELP)
    add_payment.add_argument("--method", default="cash", choices=models.PAYMENT_METHODS)
    add_payment.add_argument("--reference", default="", help="Referencia")

    def handle_add(args: argparse.Namespace) -> None:
        detail = services.TeamDetail(gateway)
        team = detail.add_payment(
            args.team_id,
            args.amount,
            payment_date=parse_date(args.payment_date),
            method=args.method,
            reference=args.reference,
        )
        summary = gateway.payment_summary(team.id)
        print(f"Pago registrado. Estado de pago de {team.name}: {team.payment_status}")
        print(f"  Total registrado: ${summary['total']:.2f}")

    add_payment.set_defaults(func=handle_add)


def _configure_match_commands(subparsers: argparse._SubParsersAction, gateway: LeagueGateway) -> None:
    standings = subparsers.add_parser("standings", help="Tabla de posiciones de una división")
    standings.add_argument("division_id", help="ID de la división")

    def handle_standings(args: argparse.Namespace) -> None:
        table = services.MatchBoard(gateway).standings(args.division_id)
        if not table:
            print("Sin equipos en esta división.")
            return
        for position, row in enumerate(table, start=1):
            print(
                f"{position:>2}. {row.team_name} | PJ {row.played} | G {row.wins} | E {row.draws} | "
                f"P {row.losses} | PF {row.points_for} | PC {row.points_against} | Pts {row.points}"
            )

    standings.set_defaults(func=handle_standings)

    calendar_parser = subparsers.add_parser("calendar", help="Calendario de partidos")
    calendar_sub = calendar_parser.add_subparsers(dest="calendar_command", required=True)

    generate = calendar_sub.add_parser("generate", help="Generar el calendario de una división")
    generate.add_argument("season_id", help="ID de la temporada")
    generate.add_argument("division_id", help="ID de la división")
    generate.add_argument("--start", help=f"Primera jornada; se ajusta al domingo. {DATE_HELP}")
    generate.add_argument("--category", dest="category_id", help="Limitar a una categoría")
    generate.add_argument("--double", action="store_true", help="Ida y vuelta")
    generate.add_argument(
        "--all-fields",
        dest="all_fields",
        action="store_true",
        help="Usar también campos en mantenimiento o reservados",
    )

    def handle_generate(args: argparse.Namespace) -> None:
        teams = gateway.get_teams_by_division(args.division_id)
        if args.category_id:
            teams = [team for team in teams if team.category_id == args.category_id]
        created = services.MatchBoard(gateway).generate_calendar(
            args.season_id,
            args.division_id,
            teams,
            parse_date(args.start) or date.today(),
            fields_only=not args.all_fields,
            double_round_robin=args.double,
        )
        print(f"{len(created)} partidos programados para {len(teams)} equipos.")
        for match in created:
            print(f"  {services.format_match(match)}")

    generate.set_defaults(func=handle_generate)


def _configure_referee_commands(subparsers: argparse._SubParsersAction, gateway: LeagueGateway) -> None:
    referee_parser = subparsers.add_parser("referees", help="Gestionar árbitros")
    referee_sub = referee_parser.add_subparsers(dest="referees_command", required=True)

    list_referees = referee_sub.add_parser("list", help="Listar árbitros")
    list_referees.add_argument("--season", dest="season_id", help="Filtrar por temporada")

    def handle_list(args: argparse.Namespace) -> None:
        referees = services.LeagueStructure(gateway).list_referees(args.season_id)
        if not referees:
            print("Sin árbitros registrados.")
            return
        for referee in referees:
            print(
                f"- [{referee.id}] {referee.name} | {referee.level} | {referee.specialization} | "
                f"partidos asignados {referee.matches_assigned}"
            )

    list_referees.set_defaults(func=handle_list)

    add_referee = referee_sub.add_parser("add", help="Registrar árbitro")
    add_referee.add_argument("season_id", help="ID de la temporada")
    add_referee.add_argument("name", help="Nombre completo")
    add_referee.add_argument("--email", default="")
    add_referee.add_argument("--phone", default="")
    add_referee.add_argument("--level", default="beginner", choices=models.REFEREE_LEVELS)
    add_referee.add_argument("--specialization", default="main", choices=models.REFEREE_SPECIALIZATIONS)

    def handle_add(args: argparse.Namespace) -> None:
        referee = services.LeagueStructure(gateway).create_referee(
            args.season_id,
            args.name,
            email=args.email,
            phone=args.phone,
            level=args.level,
            specialization=args.specialization,
        )
        print(f"Árbitro registrado: [{referee.id}] {referee.name}")

    add_referee.set_defaults(func=handle_add)

    remove = referee_sub.add_parser("remove", help="Eliminar árbitro")
    remove.add_argument("referee_id", help="ID del árbitro")

    def handle_remove(args: argparse.Namespace) -> None:
        services.LeagueStructure(gateway).delete_referee(args.referee_id)
        print("Árbitro eliminado.")

    remove.set_defaults(func=handle_remove)

    assign = referee_sub.add_parser("assign", help="Asignar árbitro a un partido")
    assign.add_argument("match_id", help="ID del partido")
    assign.add_argument("referee_id", help="ID del árbitro")

    def handle_assign(args: argparse.Namespace) -> None:
        match = services.MatchBoard(gateway).assign_referee(args.match_id, args.referee_id)
        print(f"Árbitro {match.referee_name} asignado a {services.format_match(match)}")

    assign.set_defaults(func=handle_assign)


def _configure_serve_command(subparsers: argparse._SubParsersAction, gateway: LeagueGateway) -> None:
    serve = subparsers.add_parser("serve", help="Iniciar la consola web")
    serve.add_argument("--host", default="127.0.0.1", help="Host a utilizar")
    serve.add_argument("--port", type=int, default=5000, help="Puerto del servidor")
    serve.add_argument("--debug", action="store_true", help="Activar modo debug")

    def handle_serve(args: argparse.Namespace) -> None:
        from .web import create_app

        app = create_app({"DATA_FILE": str(gateway.data_file)})
        app.run(host=args.host, port=args.port, debug=args.debug)

    serve.set_defaults(func=handle_serve)


def _global_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--data-file", dest="data_file", help="Archivo JSON de datos")
    parser.add_argument("--log-level", dest="log_level", default="WARNING", choices=LOG_LEVELS)


def build_parser(gateway: LeagueGateway) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Administración de la liga Tocho Prime")
    parser.add_argument("--version", action="version", version=f"Tocho Prime {__version__}")
    _global_options(parser)
    subparsers = parser.add_subparsers(dest="command")

    _configure_season_commands(subparsers, gateway)
    _configure_division_commands(subparsers, gateway)
    _configure_category_commands(subparsers, gateway)
    _configure_field_commands(subparsers, gateway)
    _configure_team_commands(subparsers, gateway)
    _configure_payment_commands(subparsers, gateway)
    _configure_match_commands(subparsers, gateway)
    _configure_referee_commands(subparsers, gateway)
    _configure_serve_command(subparsers, gateway)

    return parser


def dispatch_command(parser: argparse.ArgumentParser, args: argparse.Namespace) -> int:
    if getattr(args, "command", None) is None:
        parser.print_help()
        return 0
    handler: Optional[Callable[[argparse.Namespace], None]] = getattr(args, "func", None)
    if handler is None:
        parser.print_help()
        return 0
    try:
        handler(args)
    except ValidationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except GatewayError as exc:
        log.error("Command %s failed: %s", args.command, exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def run_interactive_shell(parser: argparse.ArgumentParser) -> None:
    print("Modo interactivo de Tocho Prime.")
    print("Escriba comandos como en la línea de comandos (ej.: 'seasons list').")
    print("Use 'help' para ver la ayuda y 'exit' o 'quit' para salir.\n")
    while True:
        try:
            raw = input("tocho> ").strip()
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("\nInterrupción recibida. Saliendo del modo interactivo.")
            break
        if not raw:
            continue
        lowered = raw.lower()
        if lowered in {"exit", "quit"}:
            print("¡Hasta pronto!")
            break
        if lowered in {"help", "?"}:
            parser.print_help()
            continue
        try:
            args = parser.parse_args(shlex.split(raw))
        except SystemExit:
            # argparse already printed the usage error
            continue
        dispatch_command(parser, args)


def main(argv: Optional[List[str]] = None) -> int:
    actual_args = sys.argv[1:] if argv is None else list(argv)

    bootstrap = argparse.ArgumentParser(add_help=False)
    _global_options(bootstrap)
    options, _ = bootstrap.parse_known_args(actual_args)
    logging.basicConfig(level=getattr(logging, options.log_level), format="%(levelname)s %(name)s: %(message)s")

    try:
        gateway = LeagueGateway(Path(options.data_file) if options.data_file else None)
    except GatewayError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    parser = build_parser(gateway)

    if not actual_args:
        run_interactive_shell(parser)
        return 0

    args = parser.parse_args(actual_args)
    return dispatch_command(parser, args)


if __name__ == "__main__":
    raise SystemExit(main())
