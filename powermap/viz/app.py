"""
app.py  --  Brazzaville Electricity Map
---------------------------------------
Plotly Dash dashboard for simulated household and zone electricity usage.
Switch between houses and zones, search, click to inspect, dim the usage
layer, and turn on Live mode to watch usage fluctuate every few seconds.

Run:
    python -m powermap.viz.app --seed 7
    -> http://127.0.0.1:8050
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

import dash
from dash import ALL, Input, Output, State, ctx, dcc, html
from dash.exceptions import PreventUpdate
import dash_bootstrap_components as dbc

from ..config import Settings
from ..models import Entity, EntityKind, House, ViewMode, Zone, entity_kind
from ..scoring.classify import BUCKET_COLORS, Bucket, classify, legend_entries
from ..state import DashboardState
from .map_view import MapView
from .surface import MapSurface

logger = logging.getLogger(__name__)

# ── Style constants ───────────────────────────────────────────────────────────
_SIDEBAR_BG = "#0d0d1a"
_SURFACE    = "#12122a"
_BORDER     = "#2a2a4a"
_ACCENT     = "#00d4ff"
_TEXT_PRI   = "#ffffff"
_TEXT_SEC   = "#8892b0"
_TEXT_BODY  = "#ccd6f6"
_FONT       = "system-ui, -apple-system, 'Segoe UI', Roboto, sans-serif"

_MODE_LABELS = {ViewMode.HOUSES: "Houses", ViewMode.ZONES: "Zones"}
_SEARCH_PLACEHOLDER = {
    ViewMode.HOUSES: "Search an address, quartier or district...",
    ViewMode.ZONES:  "Search a zone, district or description...",
}


# ── Sidebar component builders ────────────────────────────────────────────────

def _section_header(text):
    return html.Div(text, style={"fontSize": "10px", "fontWeight": "800",
                                  "letterSpacing": "1.8px", "color": _TEXT_SEC,
                                  "marginBottom": "10px"})


def _badge(text, color=_TEXT_SEC):
    return html.Span(text, style={
        "backgroundColor": f"{color}1a", "color": color,
        "border": f"1px solid {color}55", "borderRadius": "3px",
        "padding": "1px 7px", "fontSize": "10px", "fontWeight": "700",
        "letterSpacing": "0.6px", "textTransform": "capitalize",
    })


def _stat_row(label, value, color=_TEXT_PRI):
    return html.Div([
        html.Span(label, style={"color": _TEXT_SEC, "fontSize": "11px", "flex": "1"}),
        html.Span(value, style={"color": color, "fontWeight": "700", "fontSize": "12px"}),
    ], style={"display": "flex", "justifyContent": "space-between",
              "padding": "3px 0", "borderBottom": f"1px solid {_BORDER}"})


def build_legend(kind: EntityKind):
    title = "HOUSE USAGE (kWh/day)" if kind is EntityKind.HOUSE else "ZONE USAGE (kWh/day)"
    rows = [
        html.Div([
            html.Span(style={"display": "inline-block", "width": "9px", "height": "9px",
                             "borderRadius": "50%", "backgroundColor": color,
                             "marginRight": "8px"}),
            html.Span(label, style={"color": _TEXT_BODY, "fontSize": "11px"}),
        ], style={"marginBottom": "4px"})
        for _, color, label in legend_entries(kind)
    ]
    return [_section_header(title), *rows]


def build_summary(summary: dict):
    counts = summary["buckets"]
    return html.Div([
        _stat_row("Entities", f"{summary['count']}"),
        _stat_row("Total usage", f"{summary['total']:,.1f} kWh/day"),
        _stat_row("Mean usage", f"{summary['mean']:,.1f} kWh/day"),
        html.Div([
            _badge(f"{counts[b.value]}", BUCKET_COLORS[b]) for b in Bucket
        ], style={"display": "flex", "gap": "6px", "marginTop": "8px"}),
    ])


def build_search_results(results: list[Entity]):
    rows = []
    for entity in results:
        if entity_kind(entity) is EntityKind.HOUSE:
            title, subtitle = entity.address, entity.quartier
        else:
            title, subtitle = entity.name, entity.district
        rows.append(html.Div(
            id={"type": "search-result", "index": entity.id},
            n_clicks=0,
            children=[
                html.Div(title, style={"color": _TEXT_PRI, "fontSize": "12px",
                                       "fontWeight": "600"}),
                html.Div(subtitle, style={"color": _TEXT_SEC, "fontSize": "11px"}),
            ],
            style={"padding": "6px 10px", "cursor": "pointer",
                   "borderBottom": f"1px solid {_BORDER}"},
        ))
    return rows


def _house_details(house: House):
    return [
        html.Div([_badge(house.type, _ACCENT), _badge(house.quartier)],
                 style={"display": "flex", "gap": "6px", "marginBottom": "10px"}),
        _stat_row("Usage", f"{house.usage:.1f} kWh/day",
                  classify(house.usage, EntityKind.HOUSE).color),
        _stat_row("Residents", f"{house.residents}"),
        _stat_row("Per person", f"{house.usage_per_resident:.1f} kWh/day"),
        _stat_row("District", house.district),
    ]


def _zone_details(zone: Zone):
    return [
        html.Div([_badge(zone.type, _ACCENT), _badge(zone.district)],
                 style={"display": "flex", "gap": "6px", "marginBottom": "10px"}),
        _stat_row("Usage", f"{zone.usage:,.1f} kWh/day",
                  classify(zone.usage, EntityKind.ZONE).color),
        _stat_row("Area", f"{zone.area} km²"),
        _stat_row("Density", f"{zone.density:,.1f} kWh/km²"),
        html.Div(zone.description, style={"color": _TEXT_BODY, "fontSize": "12px",
                                          "fontStyle": "italic", "marginTop": "8px"}),
    ]


def build_detail_panel(entity: Optional[Entity]):
    if entity is None:
        return html.Span("Click a marker or zone to see its details.",
                         style={"color": _TEXT_SEC, "fontSize": "12px", "fontStyle": "italic"})
    kind = entity_kind(entity)
    body = _house_details(entity) if kind is EntityKind.HOUSE else _zone_details(entity)
    return html.Div([
        html.Div(entity.label, style={"color": _ACCENT, "fontWeight": "800",
                                      "fontSize": "15px", "marginBottom": "8px"}),
        *body,
    ], style={"backgroundColor": _SURFACE, "border": f"1px solid {_BORDER}",
              "borderRadius": "6px", "padding": "10px 14px"})


# ── Interaction handling ──────────────────────────────────────────────────────

def apply_trigger(
    state: DashboardState,
    triggered,
    *,
    view_mode=None,
    search=None,
    click_data=None,
    clicked=None,
    generation=None,
) -> bool:
    """
    Fold one UI event into *state*. Returns False when nothing changed
    (a stale tick, an unclicked result row, an unknown trigger).
    """
    if triggered == "view-mode":
        state.set_view_mode(view_mode)
        return True
    if triggered == "search-input":
        state.set_search_term(search)
        return True
    if triggered == "layer-btn":
        state.toggle_layer()
        return True
    if triggered == "map":
        state.select_by_id(MapSurface.resolve_click(click_data))
        return True
    if triggered == "live-interval":
        return state.tick(generation)
    if isinstance(triggered, dict) and triggered.get("type") == "search-result":
        if not clicked:
            return False
        state.pick_search_result(triggered["index"])
        return True
    return False


def render_outputs(state: DashboardState, view: MapView) -> tuple:
    """(figure, details, results, legend, summary, search value, layer label)."""
    with state.lock:
        mode = state.view_mode
        figure = view.render(mode, state.collection(), state.selected, state.show_layer)
        return (
            figure,
            build_detail_panel(state.selected),
            build_search_results(state.search_results()),
            build_legend(mode.kind),
            build_summary(state.summary()),
            state.search_term,
            "Hide layer" if state.show_layer else "Show layer",
        )


def live_outputs(state: DashboardState) -> tuple:
    """(interval disabled, timer generation, button label, button color)."""
    mutator = state.mutator
    if mutator.is_live:
        return False, mutator.generation, "Live", "success"
    return True, None, "Static", "secondary"


# ── App factory ───────────────────────────────────────────────────────────────

def build_layout(state: DashboardState, view: MapView):
    figure, details, results, legend, summary, search, layer_label = render_outputs(state, view)
    _, generation, live_label, live_color = live_outputs(state)
    mode = state.view_mode

    sidebar = html.Div(
        style={"backgroundColor": _SIDEBAR_BG, "borderLeft": f"1px solid {_BORDER}",
               "height": "100vh", "overflowY": "auto", "fontFamily": _FONT,
               "padding": "18px"},
        children=[
            html.Div("BRAZZAVILLE ELECTRICITY MAP",
                     style={"fontSize": "13px", "fontWeight": "900",
                            "letterSpacing": "2.5px", "color": _ACCENT, "marginBottom": "3px"}),
            html.Div("Simulated daily consumption by house and zone",
                     style={"fontSize": "11px", "color": _TEXT_SEC}),
            html.Hr(style={"borderColor": _BORDER, "margin": "14px 0 10px"}),

            dbc.RadioItems(
                id="view-mode",
                options=[{"label": _MODE_LABELS[m], "value": m.value} for m in ViewMode],
                value=mode.value,
                inline=True,
                style={"color": _TEXT_BODY, "fontSize": "12px", "marginBottom": "10px"},
            ),
            html.Div([
                dbc.Button(layer_label, id="layer-btn", n_clicks=0, size="sm",
                           color="info", outline=True),
                dbc.Button(live_label, id="live-btn", n_clicks=0, size="sm",
                           color=live_color),
            ], style={"display": "flex", "gap": "8px", "marginBottom": "14px"}),

            dbc.Input(id="search-input", type="text", value=search,
                      placeholder=_SEARCH_PLACEHOLDER[mode], size="sm"),
            html.Div(id="search-results", children=results,
                     style={"maxHeight": "220px", "overflowY": "auto", "marginBottom": "12px"}),

            html.Div(id="legend", children=legend, style={"marginBottom": "12px"}),

            _section_header("SUMMARY"),
            html.Div(id="summary", children=summary, style={"marginBottom": "14px"}),

            _section_header("DETAILS"),
            html.Div(id="detail-panel", children=details),

            dcc.Store(id="timer-generation", data=generation),
            dcc.Interval(id="live-interval", interval=state.mutator.interval_ms,
                         n_intervals=0, disabled=not state.mutator.is_live),
        ],
    )

    return dbc.Container(
        fluid=True,
        style={"padding": 0, "margin": 0, "backgroundColor": _SIDEBAR_BG,
               "overflow": "hidden", "fontFamily": _FONT},
        children=dbc.Row([
            dbc.Col(
                dcc.Graph(id="map", figure=figure, style={"height": "100vh"},
                          config={"displayModeBar": False, "scrollZoom": True}),
                width=8, style={"padding": 0},
            ),
            dbc.Col(sidebar, width=4, style={"padding": 0}),
        ], style={"height": "100vh", "margin": 0}),
    )


def create_app(state: DashboardState, view: MapView) -> dash.Dash:
    app = dash.Dash(
        __name__,
        external_stylesheets=[dbc.themes.CYBORG],
        title="Brazzaville Electricity Map",
        suppress_callback_exceptions=True,
        meta_tags=[{"name": "viewport", "content": "width=device-width, initial-scale=1"}],
    )

    def serve_layout():
        # Rebuilt on every page load so a reload shows the current shared state
        return build_layout(state, view)

    app.layout = serve_layout

    @app.callback(
        Output("map",            "figure"),
        Output("detail-panel",   "children"),
        Output("search-results", "children"),
        Output("legend",         "children"),
        Output("summary",        "children"),
        Output("search-input",   "value"),
        Output("layer-btn",      "children"),
        Input("view-mode",       "value"),
        Input("search-input",    "value"),
        Input("layer-btn",       "n_clicks"),
        Input("map",             "clickData"),
        Input({"type": "search-result", "index": ALL}, "n_clicks"),
        Input("live-interval",   "n_intervals"),
        State("timer-generation", "data"),
        prevent_initial_call=True,
    )
    def on_interaction(view_mode, search, _layer_clicks, click_data,
                       _result_clicks, _n_intervals, generation):
        """Apply the triggering event, then redraw everything that depends on state."""
        clicked = ctx.triggered[0]["value"] if ctx.triggered else None
        changed = apply_trigger(
            state, ctx.triggered_id,
            view_mode=view_mode, search=search, click_data=click_data,
            clicked=clicked, generation=generation,
        )
        if not changed:
            raise PreventUpdate
        return render_outputs(state, view)

    @app.callback(
        Output("search-input", "placeholder"),
        Input("view-mode",     "value"),
    )
    def on_mode_placeholder(view_mode):
        return _SEARCH_PLACEHOLDER[ViewMode.parse(view_mode)]

    @app.callback(
        Output("live-interval",    "disabled"),
        Output("timer-generation", "data"),
        Output("live-btn",         "children"),
        Output("live-btn",         "color"),
        Input("live-btn",          "n_clicks"),
        prevent_initial_call=True,
    )
    def on_live_toggle(_n_clicks):
        """Start a fresh timer generation or cancel the running one."""
        state.toggle_live()
        return live_outputs(state)

    return app


# ── Entry point ───────────────────────────────────────────────────────────────

def _parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Brazzaville electricity usage map.")
    parser.add_argument("--host", default=None)
    parser.add_argument("--port", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None,
                        help="Seed for the synthetic city and live fluctuations.")
    parser.add_argument("--tick-ms", type=int, default=None,
                        help="Live-mode update period in milliseconds.")
    parser.add_argument("--log-level", default=None)
    parser.add_argument("--debug", action="store_true", default=None)
    return parser.parse_args(argv)


def main(argv=None) -> None:
    if hasattr(sys.stdout, "reconfigure"):
        sys.stdout.reconfigure(encoding="utf-8", errors="replace")

    args = _parse_args(argv)
    settings = Settings.from_env().override(
        host=args.host, port=args.port, seed=args.seed, tick_ms=args.tick_ms,
        log_level=args.log_level.upper() if args.log_level else None, debug=args.debug,
    )
    logging.basicConfig(level=settings.log_level,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    state = DashboardState.generate(seed=settings.seed, tick_ms=settings.tick_ms)

    print("\n  Brazzaville Electricity Map")
    print("  ---------------------------")
    print(f"  Houses     : {len(state.houses)}")
    print(f"  Zones      : {len(state.zones)}")
    print(f"  Seed       : {settings.seed if settings.seed is not None else 'random'}")
    print(f"  Live tick  : {settings.tick_ms} ms")
    print(f"\n  -> http://{settings.host}:{settings.port}\n")

    with MapView() as view:
        app = create_app(state, view)
        logger.info("Serving %d houses and %d zones on %s:%d",
                    len(state.houses), len(state.zones), settings.host, settings.port)
        try:
            app.run(debug=settings.debug, host=settings.host, port=settings.port)
        finally:
            state.mutator.stop()


if __name__ == "__main__":
    main()
