"""Web console for the Tocho Prime league administration."""
from __future__ import annotations

import argparse
import logging
import os
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Type

from flask import Flask, current_app, flash, get_flashed_messages, jsonify, redirect, request, session, url_for

from . import __version__, forms, storage
from .errors import GatewayError, NotFoundError, ValidationError
from .gateway import LeagueGateway
from .services import (
    MATCH_STATUS_LABELS,
    CategoryManager,
    FieldBoard,
    LeagueStructure,
    MatchBoard,
    PlayerDirectory,
    TeamDetail,
)

log = logging.getLogger(__name__)

_CONFIRM_VALUES = {"1", "on", "true", "si", "sí", "yes"}


def _dump(items: Iterable[Any]) -> list:
    return [item.to_dict() for item in items]


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Crear y configurar la aplicación Flask de la consola."""

    app = Flask(__name__)
    app.config["SECRET_KEY"] = os.environ.get("TOCHO_SECRET_KEY", "tocho-demo")
    app.config["DATA_FILE"] = os.environ.get("TOCHO_DATA_FILE", str(storage.DATA_FILE))
    app.json.sort_keys = False
    if config:
        app.config.update(config)
    app.extensions["tocho_gateway"] = LeagueGateway(Path(app.config["DATA_FILE"]))

    def get_gateway() -> LeagueGateway:
        return current_app.extensions["tocho_gateway"]

    @app.before_request
    def reload_store() -> None:
        get_gateway().refresh()

    # Helpers ---------------------------------------------------------
    def _page(**payload: Any):
        payload["notifications"] = [
            forms.Notification(kind, message).to_dict()
            for kind, message in get_flashed_messages(with_categories=True)
        ]
        return jsonify(payload)

    def _flash_invalid(message: str) -> None:
        flash(message, "error")

    def _attempt(action: Callable[[], Any], success: str, failure: str) -> bool:
        """Run one mutation and flash exactly one outcome message."""
        try:
            action()
        except ValidationError as exc:
            _flash_invalid(str(exc))
            return False
        except GatewayError:
            log.exception("%s (%s %s)", failure, request.method, request.path)
            _flash_invalid(failure)
            return False
        flash(success, "success")
        return True

    def _keep_draft(key: str, draft: forms.FormDraft) -> None:
        session[f"draft:{key}"] = draft.to_dict()

    def _take_draft(key: str, draft_cls: Type[forms.FormDraft]) -> Optional[forms.FormDraft]:
        data = session.pop(f"draft:{key}", None)
        if data is None:
            return None
        values = {name: tuple(value) if isinstance(value, list) else value for name, value in data.items()}
        return draft_cls(**values)

    def _confirmed() -> bool:
        if request.form.get("confirm", "").strip().lower() in _CONFIRM_VALUES:
            return True
        flash("Confirme la eliminación antes de continuar.", "info")
        return False

    def _dialog(draft: Optional[forms.FormDraft], close_url: str) -> Optional[Dict[str, Any]]:
        return draft.dialog(close_url).to_dict() if draft else None

    def _parse_date(value: Optional[str]) -> Optional[date]:
        try:
            return storage.parse_date((value or "").strip() or None)
        except ValueError:
            return None

    def _submit(
        key: str,
        draft: forms.FormDraft,
        action: Callable[[Dict[str, Any]], Any],
        success: str,
        failure: str,
    ) -> bool:
        if not draft.can_submit:
            _flash_invalid(draft.problems()[0])
            _keep_draft(key, draft)
            return False
        fields = draft.to_fields()
        if _attempt(lambda: action(fields), success, failure):
            return True
        _keep_draft(key, draft)
        return False

    @app.errorhandler(NotFoundError)
    def handle_not_found(exc: NotFoundError):
        log.warning("Missing document: %s", exc)
        _flash_invalid("El registro solicitado no existe.")
        return redirect(url_for("dashboard"))

    # Dashboard -------------------------------------------------------
    @app.get("/")
    def dashboard():
        gateway = get_gateway()
        return _page(
            title="Tocho Prime",
            version=__version__,
            seasons=len(gateway.get_seasons()),
            teams=len(gateway.get_all_teams()),
            players=len(gateway.get_all_players()),
            matches=len(gateway.get_matches()),
            fields=len(gateway.get_fields()),
        )

    # Seasons ---------------------------------------------------------
    @app.get("/temporadas")
    def seasons_page():
        structure = LeagueStructure(get_gateway())
        seasons = structure.list_seasons()
        draft = _take_draft("season", forms.SeasonDraft)
        edit_id = request.args.get("edit")
        if draft is None and edit_id:
            season = next((item for item in seasons if item.id == edit_id), None)
            if season is None:
                _flash_invalid("Temporada seleccionada para edición no encontrada.")
            else:
                draft = forms.SeasonDraft.from_entity(season)
        elif draft is None and request.args.get("nuevo"):
            draft = forms.SeasonDraft()
        return _page(
            title="Temporadas",
            seasons=_dump(seasons),
            dialog=_dialog(draft, url_for("seasons_page")),
        )

    @app.post("/temporadas")
    def save_season():
        season_id = request.form.get("season_id") or None
        draft = forms.SeasonDraft.from_form(request.form, season_id)
        structure = LeagueStructure(get_gateway())
        if season_id:
            ok = _submit(
                "season",
                draft,
                lambda fields: structure.update_season(season_id, **fields),
                "Temporada actualizada exitosamente.",
                "Error al actualizar la temporada.",
            )
        else:
            ok = _submit(
                "season",
                draft,
                lambda fields: structure.create_season(**fields),
                "Temporada creada exitosamente.",
                "Error al crear la temporada.",
            )
        return redirect(url_for("seasons_page") if ok else url_for("seasons_page", nuevo=1))

    @app.post("/temporadas/<season_id>/eliminar")
    def delete_season(season_id: str):
        if _confirmed():
            _attempt(
                lambda: LeagueStructure(get_gateway()).delete_season(season_id),
                "Temporada eliminada.",
                "Error al eliminar la temporada.",
            )
        return redirect(url_for("seasons_page"))

    @app.post("/temporadas/<season_id>/archivar")
    def archive_season(season_id: str):
        _attempt(
            lambda: LeagueStructure(get_gateway()).archive_season(season_id),
            "Temporada archivada exitosamente.",
            "Error al archivar la temporada.",
        )
        return redirect(url_for("seasons_page"))

    @app.post("/temporadas/<season_id>/desarchivar")
    def unarchive_season(season_id: str):
        _attempt(
            lambda: LeagueStructure(get_gateway()).unarchive_season(season_id),
            "Temporada desarchivada exitosamente.",
            "Error al desarchivar la temporada.",
        )
        return redirect(url_for("seasons_page"))

    @app.post("/temporadas/<season_id>/duplicar")
    def duplicate_season(season_id: str):
        name = request.form.get("name") or None
        _attempt(
            lambda: LeagueStructure(get_gateway()).duplicate_season(season_id, name),
            "Temporada duplicada exitosamente.",
            "Error al duplicar la temporada.",
        )
        return redirect(url_for("seasons_page"))

    # Divisions -------------------------------------------------------
    @app.get("/temporadas/<season_id>/divisiones")
    def divisions_page(season_id: str):
        gateway = get_gateway()
        try:
            season = gateway.get_season_by_id(season_id)
        except NotFoundError:
            _flash_invalid("Temporada no encontrada.")
            return redirect(url_for("seasons_page"))
        divisions = LeagueStructure(gateway).list_divisions(season_id)
        draft = _take_draft("division", forms.DivisionDraft)
        if draft is None and request.args.get("nuevo"):
            draft = forms.DivisionDraft()
        return _page(
            title=f"Divisiones - {season.name}",
            season=season.to_dict(),
            divisions=_dump(divisions),
            can_create_defaults=not divisions,
            dialog=_dialog(draft, url_for("divisions_page", season_id=season_id)),
        )

    @app.post("/temporadas/<season_id>/divisiones")
    def save_division(season_id: str):
        division_id = request.form.get("division_id") or None
        draft = forms.DivisionDraft.from_form(request.form, division_id)
        structure = LeagueStructure(get_gateway())
        if division_id:
            action = lambda fields: structure.update_division(division_id, **fields)  # noqa: E731
            messages = ("División actualizada exitosamente.", "Error al actualizar la división.")
        else:
            action = lambda fields: structure.create_division(season_id, **fields)  # noqa: E731
            messages = ("División creada exitosamente.", "Error al crear la división.")
        ok = _submit("division", draft, action, *messages)
        target = url_for("divisions_page", season_id=season_id)
        return redirect(target if ok else url_for("divisions_page", season_id=season_id, nuevo=1))

    @app.post("/temporadas/<season_id>/divisiones/predeterminadas")
    def create_default_divisions(season_id: str):
        structure = LeagueStructure(get_gateway())
        if not structure.can_create_default_divisions(season_id):
            flash("La temporada ya tiene divisiones; no se crearon las predeterminadas.", "info")
        else:
            _attempt(
                lambda: structure.create_default_divisions(season_id),
                "Divisiones predeterminadas creadas exitosamente.",
                "Error al crear las divisiones predeterminadas.",
            )
        return redirect(url_for("divisions_page", season_id=season_id))

    @app.post("/divisiones/<division_id>/eliminar")
    def delete_division(division_id: str):
        division = get_gateway().get_division_by_id(division_id)
        if _confirmed():
            _attempt(
                lambda: LeagueStructure(get_gateway()).delete_division(division_id),
                "División eliminada.",
                "Error al eliminar la división.",
            )
        return redirect(url_for("divisions_page", season_id=division.season_id))

    # Categories ------------------------------------------------------
    @app.get("/divisiones/<division_id>/categorias")
    def categories_page(division_id: str):
        gateway = get_gateway()
        try:
            division = gateway.get_division_by_id(division_id)
        except NotFoundError:
            _flash_invalid("División no encontrada.")
            return redirect(url_for("seasons_page"))
        manager = CategoryManager(gateway)
        categories = manager.list_by_division(division_id)
        draft = _take_draft("category", forms.CategoryDraft)
        edit_id = request.args.get("edit")
        if draft is None and edit_id:
            category = next((item for item in categories if item.id == edit_id), None)
            draft = forms.CategoryDraft.from_entity(category) if category else None
        elif draft is None and request.args.get("nuevo"):
            draft = forms.CategoryDraft()
        return _page(
            title=f"Categorías - {division.name}",
            division=division.to_dict(),
            categories=_dump(categories),
            can_create_defaults=not categories,
            dialog=_dialog(draft, url_for("categories_page", division_id=division_id)),
        )

    @app.post("/divisiones/<division_id>/categorias")
    def save_category(division_id: str):
        gateway = get_gateway()
        division = gateway.get_division_by_id(division_id)
        category_id = request.form.get("category_id") or None
        draft = forms.CategoryDraft.from_form(request.form, category_id)
        manager = CategoryManager(gateway)
        if category_id:
            ok = _submit(
                "category",
                draft,
                lambda fields: manager.update(category_id, **fields),
                "Categoría actualizada exitosamente.",
                "Error al actualizar la categoría.",
            )
        else:
            ok = _submit(
                "category",
                draft,
                lambda fields: manager.create(division_id, division.season_id, **fields),
                "Categoría creada exitosamente.",
                "Error al crear la categoría.",
            )
        target = url_for("categories_page", division_id=division_id)
        return redirect(target if ok else url_for("categories_page", division_id=division_id, nuevo=1))

    @app.post("/divisiones/<division_id>/categorias/predeterminadas")
    def create_default_categories(division_id: str):
        gateway = get_gateway()
        division = gateway.get_division_by_id(division_id)
        manager = CategoryManager(gateway)
        if not manager.can_create_default_set(division_id):
            flash("La división ya tiene categorías; no se crearon las predeterminadas.", "info")
        else:
            _attempt(
                lambda: manager.create_default_set(division_id, division.season_id),
                "Categorías A-G creadas exitosamente.",
                "Error al crear las categorías predeterminadas.",
            )
        return redirect(url_for("categories_page", division_id=division_id))

    @app.post("/categorias/<category_id>/eliminar")
    def delete_category(category_id: str):
        category = get_gateway().get_category_by_id(category_id)
        if _confirmed():
            _attempt(
                lambda: CategoryManager(get_gateway()).delete(category_id),
                "Categoría eliminada.",
                "Error al eliminar la categoría.",
            )
        return redirect(url_for("categories_page", division_id=category.division_id))

    # Fields ----------------------------------------------------------
    @app.get("/campos")
    def fields_page():
        board = FieldBoard(get_gateway())
        board.list()
        filtered = board.filter(
            search=request.args.get("q"),
            status=request.args.get("estado"),
            field_type=request.args.get("tipo"),
        )
        draft = _take_draft("field", forms.FieldDraft)
        edit_id = request.args.get("edit")
        if draft is None and edit_id:
            item = next((entry for entry in board.fields if entry.id == edit_id), None)
            draft = forms.FieldDraft.from_entity(item) if item else None
        elif draft is None and request.args.get("nuevo"):
            draft = forms.FieldDraft()
        return _page(
            title="Campos",
            fields=_dump(filtered),
            using_fallback=board.using_fallback,
            map={zone: [item.code for item in items] for zone, items in board.map_layout().items()},
            dialog=_dialog(draft, url_for("fields_page")),
        )

    @app.post("/campos")
    def save_field():
        field_id = request.form.get("field_id") or None
        draft = forms.FieldDraft.from_form(request.form, field_id)
        board = FieldBoard(get_gateway())
        if field_id:
            ok = _submit(
                "field",
                draft,
                lambda fields: board.update(field_id, **fields),
                "Campo actualizado exitosamente.",
                "Error al actualizar el campo.",
            )
        else:
            ok = _submit(
                "field",
                draft,
                lambda fields: board.create(**fields),
                "Campo creado exitosamente.",
                "Error al crear el campo.",
            )
        return redirect(url_for("fields_page") if ok else url_for("fields_page", nuevo=1))

    @app.post("/campos/<field_id>/estado")
    def set_field_status(field_id: str):
        status = request.form.get("status", "")
        _attempt(
            lambda: FieldBoard(get_gateway()).set_status(field_id, status),
            "Estado del campo actualizado.",
            "Error al actualizar el estado del campo.",
        )
        return redirect(url_for("fields_page"))

    @app.post("/campos/predeterminados")
    def create_default_fields():
        gateway = get_gateway()
        if gateway.get_fields():
            flash("Ya existen campos registrados; no se crearon los predeterminados.", "info")
        else:
            _attempt(
                gateway.create_default_fields,
                "16 campos predeterminados creados exitosamente.",
                "Error al crear los campos predeterminados.",
            )
        return redirect(url_for("fields_page"))

    @app.post("/campos/<field_id>/eliminar")
    def delete_field(field_id: str):
        if _confirmed():
            _attempt(
                lambda: FieldBoard(get_gateway()).delete(field_id),
                "Campo eliminado.",
                "Error al eliminar el campo.",
            )
        return redirect(url_for("fields_page"))

    # Players ---------------------------------------------------------
    @app.get("/jugadores")
    def players_page():
        gateway = get_gateway()
        directory = PlayerDirectory(gateway)
        directory.list_all()
        filtered = directory.filter(
            search=request.args.get("q"),
            status=request.args.get("estado"),
            position=request.args.get("posicion"),
            team_id=request.args.get("equipo"),
        )
        draft = _take_draft("player", forms.PlayerDraft)
        if draft is None and request.args.get("nuevo"):
            draft = forms.PlayerDraft(team_id=request.args.get("equipo", ""))
        return _page(
            title="Jugadores",
            players=_dump(filtered),
            total=len(directory.players),
            teams=[{"id": team.id, "name": team.name} for team in gateway.get_all_teams()],
            dialog=_dialog(draft, url_for("players_page")),
        )

    @app.post("/jugadores")
    def save_player():
        draft = forms.PlayerDraft.from_form(request.form)
        directory = PlayerDirectory(get_gateway())
        ok = _submit(
            "player",
            draft,
            lambda fields: directory.create(**fields),
            "Jugador creado exitosamente.",
            "Error al crear el jugador.",
        )
        return redirect(url_for("players_page") if ok else url_for("players_page", nuevo=1))

    @app.post("/jugadores/<player_id>/estado")
    def set_player_status(player_id: str):
        status = request.form.get("status", "")
        _attempt(
            lambda: PlayerDirectory(get_gateway()).update_status(player_id, status),
            "Estado del jugador actualizado.",
            "Error al actualizar el estado del jugador.",
        )
        return redirect(url_for("players_page"))

    @app.post("/jugadores/<player_id>/eliminar")
    def delete_player(player_id: str):
        if _confirmed():
            _attempt(
                lambda: PlayerDirectory(get_gateway()).delete(player_id),
                "Jugador eliminado.",
                "Error al eliminar el jugador.",
            )
        return redirect(url_for("players_page"))

    # Teams -----------------------------------------------------------
    @app.get("/equipos")
    def teams_page():
        structure = LeagueStructure(get_gateway())
        teams = structure.list_teams(
            request.args.get("categoria") or None,
            status=request.args.get("estado"),
            payment_status=request.args.get("pago"),
            search=request.args.get("q"),
        )
        draft = _take_draft("team", forms.TeamDraft)
        if draft is None and request.args.get("nuevo"):
            draft = forms.TeamDraft(category_id=request.args.get("categoria", ""))
        return _page(title="Equipos", teams=_dump(teams), dialog=_dialog(draft, url_for("teams_page")))

    @app.post("/equipos")
    def create_team():
        draft = forms.TeamDraft.from_form(request.form)
        structure = LeagueStructure(get_gateway())
        ok = _submit(
            "team",
            draft,
            lambda fields: structure.create_team(**fields),
            "Equipo creado exitosamente.",
            "Error al crear el equipo.",
        )
        return redirect(url_for("teams_page") if ok else url_for("teams_page", nuevo=1))

    @app.post("/equipos/<team_id>/estado")
    def set_team_status(team_id: str):
        status = request.form.get("status", "")
        _attempt(
            lambda: LeagueStructure(get_gateway()).update_team_status(team_id, status),
            "Estado actualizado exitosamente.",
            "Error al actualizar el estado.",
        )
        return redirect(url_for("teams_page"))

    @app.post("/equipos/<team_id>/estado-pago")
    def set_team_payment_status(team_id: str):
        payment_status = request.form.get("payment_status", "")
        _attempt(
            lambda: LeagueStructure(get_gateway()).set_payment_status(team_id, payment_status),
            "Estado de pago actualizado exitosamente.",
            "Error al actualizar el estado de pago.",
        )
        return redirect(url_for("teams_page"))

    @app.get("/equipos/<team_id>")
    def team_detail_page(team_id: str):
        detail = TeamDetail(get_gateway())
        try:
            view = detail.load(team_id)
        except NotFoundError:
            _flash_invalid("Equipo no encontrado o sin categoría válida.")
            return redirect(url_for("teams_page"))
        except GatewayError:
            log.exception("Could not load team %s", team_id)
            _flash_invalid("Error al cargar los datos del equipo.")
            return redirect(url_for("teams_page"))
        close_url = url_for("team_detail_page", team_id=team_id)
        draft: Optional[forms.FormDraft] = (
            _take_draft("team_edit", forms.TeamDraft)
            or _take_draft("roster_player", forms.RosterPlayerDraft)
            or _take_draft("payment", forms.PaymentDraft)
        )
        if draft is None and request.args.get("editar"):
            draft = forms.TeamDraft.from_entity(view.team)
        elif draft is None and request.args.get("jugador"):
            draft = forms.RosterPlayerDraft(team_id=team_id)
        elif draft is None and request.args.get("pago"):
            draft = forms.PaymentDraft(payment_date=date.today().isoformat())
        record = view.record
        return _page(
            title=view.team.name,
            team=view.team.to_dict(),
            category=view.category.to_dict() if view.category else None,
            division=view.division.to_dict() if view.division else None,
            season=view.season.to_dict() if view.season else None,
            players=_dump(view.players),
            payments=_dump(view.payments),
            payment_summary=view.payment_summary,
            recent_matches=_dump(view.recent_matches),
            record={
                "wins": record.wins,
                "draws": record.draws,
                "losses": record.losses,
                "total_games": record.total_games,
            },
            dialog=_dialog(draft, close_url),
        )

    @app.post("/equipos/<team_id>")
    def update_team(team_id: str):
        draft = forms.TeamDraft.from_form(request.form, team_id)
        detail = TeamDetail(get_gateway())
        ok = _submit(
            "team_edit",
            draft,
            lambda fields: detail.update_team(team_id, **fields),
            "Equipo actualizado exitosamente.",
            "Error al actualizar el equipo.",
        )
        target = url_for("team_detail_page", team_id=team_id)
        return redirect(target if ok else url_for("team_detail_page", team_id=team_id, editar=1))

    @app.post("/equipos/<team_id>/jugadores")
    def add_roster_player(team_id: str):
        draft = forms.RosterPlayerDraft.from_form(request.form).with_changes(team_id=team_id)
        detail = TeamDetail(get_gateway())

        def add(fields: Dict[str, Any]) -> None:
            fields.pop("team_id", None)
            detail.add_player(team_id, **fields)

        ok = _submit(
            "roster_player",
            draft,
            add,
            "Jugador agregado exitosamente.",
            "Error al agregar el jugador.",
        )
        target = url_for("team_detail_page", team_id=team_id)
        return redirect(target if ok else url_for("team_detail_page", team_id=team_id, jugador=1))

    @app.post("/equipos/<team_id>/capitan")
    def set_captain(team_id: str):
        player_id = request.form.get("player_id", "")
        _attempt(
            lambda: TeamDetail(get_gateway()).set_captain(team_id, player_id),
            "Capitán designado exitosamente.",
            "Error al designar el capitán.",
        )
        return redirect(url_for("team_detail_page", team_id=team_id))

    @app.post("/equipos/<team_id>/subcapitan")
    def set_vice_captain(team_id: str):
        player_id = request.form.get("player_id", "")
        _attempt(
            lambda: TeamDetail(get_gateway()).set_vice_captain(team_id, player_id),
            "Subcapitán designado exitosamente.",
            "Error al designar el subcapitán.",
        )
        return redirect(url_for("team_detail_page", team_id=team_id))

    @app.post("/equipos/<team_id>/pagos")
    def add_payment(team_id: str):
        draft = forms.PaymentDraft.from_form(request.form)
        detail = TeamDetail(get_gateway())
        ok = _submit(
            "payment",
            draft,
            lambda fields: detail.add_payment(team_id, **fields),
            "Pago registrado exitosamente.",
            "Error al registrar el pago.",
        )
        target = url_for("team_detail_page", team_id=team_id)
        return redirect(target if ok else url_for("team_detail_page", team_id=team_id, pago=1))

    @app.post("/equipos/<team_id>/eliminar")
    def delete_team(team_id: str):
        if not _confirmed():
            return redirect(url_for("team_detail_page", team_id=team_id))
        ok = _attempt(
            lambda: LeagueStructure(get_gateway()).delete_team(team_id),
            "Equipo eliminado.",
            "Error al eliminar el equipo.",
        )
        return redirect(url_for("teams_page") if ok else url_for("team_detail_page", team_id=team_id))

    # Matches ---------------------------------------------------------
    @app.get("/partidos")
    def matches_page():
        board = MatchBoard(get_gateway())
        seasons = board.load()
        season_id = request.args.get("temporada") or None
        division_id = request.args.get("division") or None
        if season_id:
            board.select_season(season_id)
        if division_id:
            board.select_division(division_id)
        rounds = board.rounds(
            status=request.args.get("estado"),
            search=request.args.get("q"),
            category_id=request.args.get("categoria"),
        )
        draft = _take_draft("match", forms.MatchDraft)
        edit_id = request.args.get("editar")
        if draft is None and edit_id:
            match = next((item for item in board.matches if item.id == edit_id), None)
            draft = forms.MatchDraft.from_entity(match) if match else None
        elif draft is None and request.args.get("nuevo"):
            draft = forms.MatchDraft(season_id=season_id or "", division_id=division_id or "")
        close_url = url_for("matches_page", temporada=season_id, division=division_id)
        return _page(
            title="Partidos",
            seasons=_dump(seasons),
            divisions=_dump(board.divisions),
            referees=_dump(board.referees),
            teams=_dump(board.teams),
            status_labels=MATCH_STATUS_LABELS,
            rounds=[{"round": number, "matches": _dump(matches)} for number, matches in rounds],
            dialog=_dialog(draft, close_url),
        )

    @app.post("/partidos")
    def create_match():
        draft = forms.MatchDraft.from_form(request.form)
        ok = _submit(
            "match",
            draft,
            lambda fields: MatchBoard(get_gateway()).create_match(**fields),
            "Partido creado exitosamente.",
            "Error al crear el partido.",
        )
        target = url_for("matches_page", temporada=draft.season_id, division=draft.division_id)
        if ok:
            return redirect(target)
        return redirect(url_for("matches_page", temporada=draft.season_id, division=draft.division_id, nuevo=1))

    @app.post("/partidos/<match_id>")
    def update_match(match_id: str):
        match = get_gateway().get_match_by_id(match_id)
        draft = forms.MatchDraft.from_form(request.form, match_id)
        ok = _submit(
            "match",
            draft,
            lambda fields: MatchBoard(get_gateway()).update_match(match_id, **fields),
            "Partido actualizado exitosamente.",
            "Error al actualizar el partido.",
        )
        if ok:
            return redirect(url_for("matches_page", temporada=match.season_id, division=match.division_id))
        return redirect(
            url_for("matches_page", temporada=match.season_id, division=match.division_id, editar=match_id)
        )

    @app.post("/partidos/<match_id>/arbitro")
    def assign_referee(match_id: str):
        match = get_gateway().get_match_by_id(match_id)
        referee_id = request.form.get("referee_id", "")
        _attempt(
            lambda: MatchBoard(get_gateway()).assign_referee(match_id, referee_id),
            "Árbitro asignado exitosamente.",
            "Error al asignar el árbitro.",
        )
        return redirect(url_for("matches_page", temporada=match.season_id, division=match.division_id))

    @app.post("/partidos/calendario")
    def generate_calendar():
        gateway = get_gateway()
        season_id = request.form.get("season_id", "")
        division_id = request.form.get("division_id", "")
        category_id = request.form.get("category_id") or None
        start = _parse_date(request.form.get("start_date")) or date.today()
        fields_only = request.form.get("fields_only", "1").strip().lower() in _CONFIRM_VALUES
        double = request.form.get("double_round_robin", "").strip().lower() in _CONFIRM_VALUES
        board = MatchBoard(gateway)
        teams = gateway.get_teams_by_division(division_id) if division_id else []
        if category_id:
            teams = [team for team in teams if team.category_id == category_id]
        _attempt(
            lambda: board.generate_calendar(season_id, division_id, teams, start, fields_only, double),
            f"Calendario generado exitosamente para {len(teams)} equipos.",
            "Error al generar el calendario.",
        )
        return redirect(url_for("matches_page", temporada=season_id, division=division_id))

    @app.post("/partidos/<match_id>/resultado")
    def record_result(match_id: str):
        match = get_gateway().get_match_by_id(match_id)
        _attempt(
            lambda: MatchBoard(get_gateway()).record_result(
                match_id,
                request.form.get("home_score"),
                request.form.get("away_score"),
                request.form.get("notes") or None,
            ),
            "Resultado registrado exitosamente.",
            "Error al registrar el resultado.",
        )
        return redirect(url_for("matches_page", temporada=match.season_id, division=match.division_id))

    @app.post("/partidos/<match_id>/eliminar")
    def delete_match(match_id: str):
        season_id = request.form.get("season_id", "")
        division_id = request.form.get("division_id", "")
        if _confirmed():
            _attempt(
                lambda: MatchBoard(get_gateway()).delete_match(match_id),
                "Partido eliminado exitosamente.",
                "Error al eliminar el partido.",
            )
        return redirect(url_for("matches_page", temporada=season_id, division=division_id))

    @app.get("/divisiones/<division_id>/posiciones")
    def standings_page(division_id: str):
        gateway = get_gateway()
        division = gateway.get_division_by_id(division_id)
        table = MatchBoard(gateway).standings(division_id)
        return _page(
            title=f"Tabla de posiciones - {division.name}",
            standings=[dict(row.__dict__, difference=row.difference) for row in table],
        )

    @app.get("/arbitros")
    def referees_page():
        structure = LeagueStructure(get_gateway())
        season_id = request.args.get("temporada") or None
        referees = structure.list_referees(season_id)
        draft = _take_draft("referee", forms.RefereeDraft)
        edit_id = request.args.get("editar")
        if draft is None and edit_id:
            referee = next((item for item in referees if item.id == edit_id), None)
            draft = forms.RefereeDraft.from_entity(referee) if referee else None
        elif draft is None and request.args.get("nuevo"):
            draft = forms.RefereeDraft()
        return _page(
            title="Árbitros",
            referees=_dump(referees),
            dialog=_dialog(draft, url_for("referees_page", temporada=season_id)),
        )

    @app.post("/arbitros")
    def save_referee():
        referee_id = request.form.get("referee_id") or None
        season_id = request.form.get("season_id", "")
        draft = forms.RefereeDraft.from_form(request.form, referee_id)
        structure = LeagueStructure(get_gateway())
        if referee_id:
            ok = _submit(
                "referee",
                draft,
                lambda fields: structure.update_referee(referee_id, **fields),
                "Árbitro actualizado exitosamente.",
                "Error al actualizar el árbitro.",
            )
        else:
            ok = _submit(
                "referee",
                draft,
                lambda fields: structure.create_referee(season_id, **fields),
                "Árbitro creado exitosamente.",
                "Error al crear el árbitro.",
            )
        target = url_for("referees_page", temporada=season_id or None)
        return redirect(target if ok else url_for("referees_page", temporada=season_id or None, nuevo=1))

    @app.post("/arbitros/<referee_id>/eliminar")
    def delete_referee(referee_id: str):
        if _confirmed():
            _attempt(
                lambda: LeagueStructure(get_gateway()).delete_referee(referee_id),
                "Árbitro eliminado.",
                "Error al eliminar el árbitro.",
            )
        return redirect(url_for("referees_page"))

    return app


def main() -> None:
    parser = argparse.ArgumentParser(description="Iniciar la consola web de Tocho Prime")
    parser.add_argument("--host", default="0.0.0.0", help="Host a utilizar")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", 5000)), help="Puerto del servidor")
    parser.add_argument("--data-file", dest="data_file", help="Archivo JSON de datos")
    parser.add_argument("--debug", action="store_true", help="Activar modo debug")
    args = parser.parse_args()
    logging.basicConfig(level=logging.DEBUG if args.debug else logging.INFO)
    config = {"DATA_FILE": args.data_file} if args.data_file else None
    create_app(config).run(host=args.host, port=args.port, debug=args.debug)


if __name__ == "__main__":
    main()
