"""
Visualization functions for the withdrawal planner using Plotly.
Creates the balance path chart and the required-capital matrix.
"""
import plotly.graph_objects as go
import numpy as np
import pandas as pd
from typing import Dict, List, Sequence

from calculations import required_capital
from models import SimulationResult


CHART_PALETTES: Dict[str, List[str]] = {
    'dark': ['#5da4d4', '#72b3de', '#87c2e8', '#9cd0f0', '#b1ddf5', '#c6e9fa'],
    'light': ['#3d7ea6', '#5a92b5', '#7aabca', '#9ac4df', '#baddf4', '#d5ebf9'],
}

_TEMPLATES = {'dark': 'plotly_dark', 'light': 'plotly_white'}


def get_chart_palette(theme: str) -> List[str]:
    """Six-color palette for the given theme ("light" or "dark")"""
    return CHART_PALETTES['dark'] if theme == 'dark' else CHART_PALETTES['light']


def _hex_to_rgba(color: str, alpha: float) -> str:
    red, green, blue = (int(color[i:i + 2], 16) for i in (1, 3, 5))
    return f"rgba({red},{green},{blue},{alpha})"


def _to_plot_values(values: Sequence) -> np.ndarray:
    """None markers become NaN so Plotly leaves a gap"""
    return np.array([np.nan if v is None else v for v in values], dtype=float)


def create_balance_path_chart(result: SimulationResult,
                              theme: str = 'dark',
                              title: str = "Balance Path") -> go.Figure:
    """
    Create the accumulation / withdrawal line chart with optional P10-P90 band.

    Args:
        result: SimulationResult from run_simulation
        theme: "light" or "dark"
        title: Chart title

    Returns:
        Plotly figure
    """
    palette = get_chart_palette(theme)
    years = [float(label) for label in result.labels]

    fig = go.Figure()

    if result.has_bands:
        # Invisible upper edge, the P10 trace fills up to it
        fig.add_trace(go.Scatter(
            x=years, y=list(result.p90),
            mode='lines',
            line=dict(color='rgba(0,0,0,0)'),
            showlegend=False,
            hoverinfo='skip'
        ))
        fig.add_trace(go.Scatter(
            x=years, y=list(result.p10),
            fill='tonexty',
            mode='lines',
            line=dict(color=palette[3], width=1),
            fillcolor=_hex_to_rgba(palette[4], 0.25),
            name='P10-P90 Range',
            customdata=np.column_stack([result.p10, result.p90]),
            hovertemplate="<b>Year:</b> %{x}<br>" +
                          "<b>P10:</b> %{customdata[0]:,.0f}<br>" +
                          "<b>P90:</b> %{customdata[1]:,.0f}<br>" +
                          "<extra></extra>"
        ))
        fig.add_trace(go.Scatter(
            x=years, y=list(result.p50),
            mode='lines',
            line=dict(color=palette[2], width=2, dash='dot'),
            name='P50 (Median)',
            hovertemplate="<b>Year:</b> %{x}<br><b>Median:</b> %{y:,.0f}<extra></extra>"
        ))

    fig.add_trace(go.Scatter(
        x=years, y=_to_plot_values(result.acc_line),
        mode='lines',
        line=dict(color=palette[0], width=3),
        name='Accumulation',
        hovertemplate="<b>Year:</b> %{x}<br><b>Balance:</b> %{y:,.0f}<extra></extra>"
    ))
    fig.add_trace(go.Scatter(
        x=years, y=_to_plot_values(result.withdraw_line),
        mode='lines',
        line=dict(color=palette[1], width=3),
        name='Withdrawal',
        hovertemplate="<b>Year:</b> %{x}<br><b>Balance:</b> %{y:,.0f}<extra></extra>"
    ))

    fig.add_hline(y=0, line_width=1, line_dash='dash', line_color='gray')
    if result.ruin_month is not None:
        fig.add_vline(
            x=result.ruin_month / 12,
            line_width=2, line_dash='dash', line_color='red',
            annotation_text=f"Runs out at {result.ruin_month / 12:.1f}y",
            annotation_position='top'
        )

    fig.update_layout(
        title=title,
        xaxis_title="Years",
        yaxis_title="Balance (EUR)",
        template=_TEMPLATES.get(theme, 'plotly_white'),
        hovermode="x unified",
        legend=dict(x=0.02, y=0.98)
    )
    return fig


def required_capital_frame(targets: Sequence[float],
                           years_list: Sequence[float],
                           cagr: float) -> pd.DataFrame:
    """Required starting capital for every (years, target) grid cell"""
    data = [[required_capital(target, years, cagr) for target in targets]
            for years in years_list]
    return pd.DataFrame(data, index=pd.Index(list(years_list), name='years'),
                        columns=pd.Index(list(targets), name='target'))


def create_required_capital_matrix(targets: Sequence[float],
                                   years_list: Sequence[float],
                                   cagr: float,
                                   theme: str = 'dark') -> go.Figure:
    """
    Create a heatmap of required capital over the target x years grid.

    Args:
        targets: Monthly withdrawal grid
        years_list: Withdrawal-years grid
        cagr: Growth rate in percent used for every cell
        theme: "light" or "dark"

    Returns:
        Plotly figure
    """
    palette = get_chart_palette(theme)
    frame = required_capital_frame(targets, years_list, cagr)

    fig = go.Figure(data=go.Heatmap(
        z=frame.values,
        x=[f"{t:g}" for t in frame.columns],
        y=[f"{y:g}y" for y in frame.index],
        colorscale=[[0.0, palette[5]], [1.0, palette[0]]],
        text=[[f"{v:,.0f}" for v in row] for row in frame.values],
        texttemplate="%{text}",
        hovertemplate="<b>Target:</b> %{x}/mo<br><b>Years:</b> %{y}<br>" +
                      "<b>Required:</b> %{z:,.0f}<extra></extra>",
        colorbar=dict(title="EUR")
    ))

    fig.update_layout(
        title=f"Required Starting Capital at {cagr:g}% CAGR",
        xaxis_title="Monthly Withdrawal (EUR)",
        yaxis_title="Withdrawal Years",
        template=_TEMPLATES.get(theme, 'plotly_white')
    )
    return fig
