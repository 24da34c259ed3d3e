"""
Depth-chart host (Dash): drives the simulator on an interval and draws the
mirrored cumulative depth, iceberg bases, spoof walls and the print tape.
Run:
    depthsim-app
"""

from __future__ import annotations
import logging

import numpy as np
from dash import Dash, dcc, html, Input, Output, State
import plotly.graph_objects as go

from depthsim.book import ASK, BID, PriceLevel
from depthsim.flow import Tape
from depthsim.simulator import DepthSimulator, Snapshot

logger = logging.getLogger(__name__)

FRAME_SECONDS = 0.25
AGGRESSION_SCALE = 600.0

BID_COLOR = 'rgba(0,255,154,0.85)'
ASK_COLOR = 'rgba(255,107,107,0.85)'
ICEBERG_COLOR = 'rgba(12,120,140,0.55)'


# -----------------------
# Renderer helpers
# -----------------------

def iceberg_visible(level: PriceLevel, side: str, sensitivity: float) -> bool:
    return level.hidden(side) > sensitivity * 2


def aggression_gauge(cumulative_signed_volume: float) -> float:
    """-1 (sellers in control) .. +1 (buyers in control)."""
    return float(np.clip(cumulative_signed_volume / AGGRESSION_SCALE * 0.5, -1.0, 1.0))


def _side_levels(snap: Snapshot, side: str):
    # same walk order as the aggregator; out-of-band steps map to None
    count = len(snap.cumulative_bid if side == BID else snap.cumulative_ask)
    if side == BID:
        idx = [snap.mid_index - k for k in range(count)]
    else:
        idx = [snap.mid_index + 1 + k for k in range(count)]
    return [snap.levels[i] if 0 <= i < len(snap.levels) else None for i in idx]


def build_depth_figure(snap: Snapshot, sensitivity: float = 0.5):
    fig = go.Figure()
    for side, widths, color, sign in ((BID, snap.cumulative_bid, BID_COLOR, -1),
                                      (ASK, snap.cumulative_ask, ASK_COLOR, 1)):
        levels = _side_levels(snap, side)
        pts = [(sign * w, lvl.price) for w, lvl in zip(widths, levels) if lvl is not None]
        if pts:
            fig.add_trace(go.Scatter(x=[x for x, _ in pts], y=[y for _, y in pts],
                                     mode='lines', line=dict(shape='vh', color=color, width=2),
                                     fill='tozerox', name='Bids' if side == BID else 'Asks'))
        ice = [(sign * w * 0.75, lvl.price) for w, lvl in zip(widths, levels)
               if lvl is not None and iceberg_visible(lvl, side, sensitivity)]
        if ice:
            fig.add_trace(go.Scatter(x=[x for x, _ in ice], y=[y for _, y in ice], mode='markers',
                                     marker=dict(symbol='square', size=7, color=ICEBERG_COLOR),
                                     name='Iceberg ' + side))
    spoofs = [snap.levels[i] for i in snap.spoof_levels]
    if spoofs:
        fig.add_trace(go.Scatter(
            x=[0.0] * len(spoofs), y=[lvl.price for lvl in spoofs], mode='markers',
            marker=dict(size=9, symbol='line-ew-open',
                        opacity=max(lvl.spoof_alpha for lvl in spoofs), color='white'),
            name='Spoof'))
    fig.add_vline(x=0, line=dict(color='gray', width=1, dash='dot'))
    fig.update_layout(template='plotly_dark', height=600, xaxis_range=[-0.5, 0.5],
                      margin=dict(l=60, r=20, t=20, b=30),
                      legend=dict(orientation='h', yanchor='top', y=0.99, xanchor='left', x=0.01))
    return fig


def build_tape_figure(tape: Tape):
    df = tape.to_df()
    fig = go.Figure()
    if not df.empty:
        colors = np.where(df['side'] == 'BUY', ASK_COLOR, BID_COLOR)
        fig.add_trace(go.Scatter(x=df['time'], y=df['price'], mode='markers', name='Prints',
                                 marker=dict(size=np.clip(df['filled'] * 0.15, 2, 7) * 2,
                                             color=colors, opacity=0.7)))
    fig.update_layout(template='plotly_dark', height=200, margin=dict(l=40, r=20, t=10, b=30))
    return fig


# -----------------------
# Dash App wiring (Interval-driven)
# -----------------------

def create_app(sim: DepthSimulator):
    cfg = sim.config
    app = Dash(__name__)
    app.layout = html.Div([
        html.Div([
            html.H4("Depth Chart Microstructure Simulator", style={'color': '#ddd'}),
            html.Div(id='stats', style={'color': '#ddd'})
        ]),
        html.Div([
            dcc.Graph(id='depth-graph'),
            dcc.Graph(id='tape-graph'),
        ], style={'width': '70%', 'display': 'inline-block', 'verticalAlign': 'top'}),
        html.Div([
            html.Button("Pause/Resume", id='pause', n_clicks=0),
            html.Button("Reset Flow", id='reset-flow', n_clicks=0),
            html.Br(),
            html.Label("Replay Speed", style={'color': '#ccc'}),
            dcc.Slider(id='speed-slider', min=0.25, max=4.0, step=0.25, value=cfg.replay_speed),
            html.Label("Visible Depth Levels", style={'color': '#ccc'}),
            dcc.Slider(id='levels-slider', min=8, max=60, step=1, value=cfg.visible_depth_levels),
            html.Label("Max Volume Clamp", style={'color': '#ccc'}),
            dcc.Slider(id='clamp-slider', min=40, max=400, step=10, value=cfg.max_volume_clamp),
            html.Label("Iceberg Sensitivity", style={'color': '#ccc'}),
            dcc.Slider(id='iceberg-slider', min=0.0, max=1.0, step=0.05, value=cfg.iceberg_sensitivity),
            html.Label("Aggressor Rate", style={'color': '#ccc'}),
            dcc.Slider(id='rate-slider', min=0.0, max=5.0, step=0.1, value=cfg.spawn_rate),
        ], style={'width': '28%', 'display': 'inline-block', 'paddingLeft': '8px', 'verticalAlign': 'top'}),

        dcc.Interval(id='interval', interval=int(FRAME_SECONDS * 1000), n_intervals=0),
        dcc.Store(id='paused', data=False),
        dcc.Store(id='flow-resets', data=0),
    ], style={'backgroundColor': '#111', 'padding': 10})

    @app.callback(Output('paused', 'data'), Input('pause', 'n_clicks'), State('paused', 'data'))
    def toggle_pause(n_clicks, state):
        if not n_clicks:
            return False
        return not state

    @app.callback(Output('flow-resets', 'data'), Input('reset-flow', 'n_clicks'),
                  prevent_initial_call=True)
    def reset_flow(n_clicks):
        sim.reset_flow()
        return n_clicks

    @app.callback(
        Output('depth-graph', 'figure'),
        Output('tape-graph', 'figure'),
        Output('stats', 'children'),
        Input('interval', 'n_intervals'),
        Input('paused', 'data'),
        Input('speed-slider', 'value'),
        Input('levels-slider', 'value'),
        Input('clamp-slider', 'value'),
        Input('iceberg-slider', 'value'),
        Input('rate-slider', 'value'),
    )
    def update(n_intervals, paused, speed, levels, clamp, sensitivity, rate):
        cfg = sim.configure(replay_speed=speed, visible_depth_levels=levels,
                            max_volume_clamp=clamp, iceberg_sensitivity=sensitivity,
                            spawn_rate=rate)
        if not paused:
            sim.step(FRAME_SECONDS)
        snap = sim.snapshot()
        stats = [
            html.Div(f"Mid: {snap.mid_price}", style={'color': '#ccc'}),
            html.Div(f"Bid depth ({cfg.visible_depth_levels} lvls): "
                     f"{round(snap.cumulative_bid_depth[-1], 1)}", style={'color': '#ccc'}),
            html.Div(f"Ask depth ({cfg.visible_depth_levels} lvls): "
                     f"{round(snap.cumulative_ask_depth[-1], 1)}", style={'color': '#ccc'}),
            html.Div(f"CVD: {round(snap.cumulative_signed_volume, 1)}", style={'color': '#ccc'}),
            html.Div(f"Aggression: {round(aggression_gauge(snap.cumulative_signed_volume), 3)}",
                     style={'color': '#ccc'}),
            html.Div(f"In flight: {snap.in_flight}  Spoof walls: {len(snap.spoof_levels)}",
                     style={'color': '#ccc'}),
        ]
        return build_depth_figure(snap, cfg.iceberg_sensitivity), build_tape_figure(sim.state.tape), stats

    return app


# -----------------------
# Entrypoint
# -----------------------

def main():
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    sim = DepthSimulator(level_count=60, tick=1.0, mid_price=1000.0, seed=42)
    logger.info("starting depth chart on port 8050 (%d levels)", len(sim.state.ladder))
    app = create_app(sim)
    app.run(debug=False, port=8050)


if __name__ == "__main__":
    main()
