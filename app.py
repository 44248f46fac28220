import logging
from dataclasses import replace

import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from valuation_copilot.core import config
from valuation_copilot.core.config import Sector, Region, SECTOR_LABELS, REGION_LABELS, RISK_CATEGORIES
from valuation_copilot.core.database import get_deal_store
from valuation_copilot.core.llm_service import LLMService
from valuation_copilot.models import RiskFactorInputs
from valuation_copilot.services import (
    CopilotChat,
    DealRepository,
    ValuationSession,
    berkus_input_limits,
    run_gut_check,
    sensitivity_frame
)
from valuation_copilot.utils import format_currency, format_compact

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(name)s %(levelname)s %(message)s")
logger = logging.getLogger(__name__)

# Set page configuration
st.set_page_config(
    page_title="Valuation Copilot",
    page_icon="💼",
    layout="wide",
    initial_sidebar_state="expanded"
)

# Custom CSS
st.markdown("""
<style>
    .main .block-container {
        padding-top: 2rem;
        padding-bottom: 2rem;
    }
    h1, h2, h3 {
        color: #1E3A8A;
    }
    .metric-card {
        background-color: #EFF6FF;
        border-radius: 0.5rem;
        padding: 1rem;
        text-align: center;
        border: 1px solid #BFDBFE;
    }
    .metric-value {
        font-size: 1.5rem;
        font-weight: bold;
        color: #1E3A8A;
    }
    .metric-label {
        font-size: 0.875rem;
        color: #64748B;
    }
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_gateway():
    return LLMService()


@st.cache_resource
def get_repository():
    return DealRepository(get_deal_store())


def init_state():
    if 'session' not in st.session_state:
        st.session_state.session = ValuationSession(repository=get_repository())
    if 'chat' not in st.session_state:
        st.session_state.chat = CopilotChat(st.session_state.session, get_gateway())


def metric_card(label, value):
    st.markdown(f"""
    <div class="metric-card">
        <div class="metric-value">{format_currency(value)}</div>
        <div class="metric-label">{label}</div>
    </div>
    """, unsafe_allow_html=True)


def render_sidebar(session):
    with st.sidebar:
        st.title("💼 Valuation Copilot")

        sectors = list(Sector)
        regions = list(Region)
        sector = st.selectbox("Sector", sectors, index=sectors.index(session.context.sector),
                              format_func=SECTOR_LABELS.get)
        region = st.selectbox("Region", regions, index=regions.index(session.context.region),
                              format_func=REGION_LABELS.get)
        if (sector, region) != (session.context.sector, session.context.region):
            session.set_context(replace(session.context, sector=sector, region=region))
            st.rerun()

        st.markdown("---")
        st.markdown("### Deals")
        deal_name = st.text_input("Deal name")
        if st.button("Save deal", disabled=not deal_name.strip()):
            summary = session.save_deal(deal_name.strip())
            st.success(f"Saved '{summary.name}'")

        deals = session.saved_deals()
        if deals:
            choice = st.selectbox("Saved deals", deals, format_func=lambda d: f"{d.name} ({d.date})")
            if st.button("Load deal"):
                if session.load_deal(choice.id):
                    st.rerun()
                else:
                    st.warning("That deal could not be loaded.")

        st.markdown("---")
        page = st.radio("Navigation", [
            "🧮 Methods",
            "📊 Triangulation",
            "🧠 Gut Check",
            "💬 Copilot",
        ], key="main_nav")
    return page


def render_methods(session):
    defaults = session.smart_defaults
    berkus_tab, scorecard_tab, risk_tab, vc_tab, cost_tab = st.tabs(
        ["Berkus", "Scorecard", "Risk Factor", "VC Method", "Cost to Duplicate"]
    )

    with berkus_tab:
        b = session.berkus_inputs
        limits = berkus_input_limits(defaults, b)
        updated = replace(
            b,
            idea_value=st.slider("Sound Idea", 0.0, float(limits["idea_value"]), float(b.idea_value), 50_000.0),
            prototype_value=st.slider("Prototype / Technology", 0.0, float(limits["prototype_value"]),
                                      float(b.prototype_value), 50_000.0),
            team_value=st.slider("Management Team", 0.0, float(limits["team_value"]), float(b.team_value), 50_000.0),
            relationships_value=st.number_input("Strategic Relationships", 0.0, value=float(b.relationships_value)),
            sales_value=st.number_input("Product Rollout / Sales", 0.0, value=float(b.sales_value)),
        )
        if updated != b:
            session.set_berkus_inputs(updated)
        metric_card("Berkus Valuation", session.berkus_valuation)

    with scorecard_tab:
        s = session.scorecard_inputs
        weights = defaults.scorecard.to_dict()
        market_average = st.number_input("Market Median Pre-Money", 0.0, value=float(s.market_average))
        scores = {
            name: st.slider(f"{name.replace('_', ' ').title()} ({weights[name]:.0%} weight)", 0.0, 2.0,
                            float(value), 0.05)
            for name, value in s.scores().items()
        }
        updated = replace(s, market_average=market_average, **{f"{name}_score": v for name, v in scores.items()})
        if updated != s:
            session.set_scorecard_inputs(updated)
        metric_card("Scorecard Valuation", session.scorecard_valuation)

    with risk_tab:
        r = session.risk_factor_inputs
        base = st.number_input("Base Valuation", 0.0, value=float(r.base_valuation))
        risk_scores = tuple(
            st.select_slider(category, options=RiskFactorInputs.score_options(), value=score)
            for category, score in zip(RISK_CATEGORIES, r.risk_scores)
        )
        updated = replace(r, base_valuation=base, risk_scores=risk_scores)
        if updated != r:
            session.set_risk_factor_inputs(updated)
        metric_card("Risk Factor Valuation", session.risk_factor_valuation)

    with vc_tab:
        v = session.vc_inputs
        updated = replace(
            v,
            exit_revenue=st.number_input("Projected Exit Revenue", 0.0, value=float(v.exit_revenue)),
            exit_multiple=st.number_input("Exit Multiple", 0.0, value=float(v.exit_multiple)),
            required_roi=st.number_input("Target ROI (x)", 0.0, value=float(v.required_roi)),
            investment_amount=st.number_input("Investment Amount", 0.0, value=float(v.investment_amount)),
        )
        if updated != v:
            session.set_vc_inputs(updated)
        result = session.vc_result
        col1, col2, col3 = st.columns(3)
        with col1:
            metric_card("Terminal Value", result.terminal_value)
        with col2:
            metric_card("Post-Money", result.post_money)
        with col3:
            metric_card("Pre-Money", result.pre_money)
        if result.is_negative:
            st.error("Warning: Negative Valuation. ROI target too high.")

        st.markdown("### Sensitivity (pre-money)")
        frame = sensitivity_frame(session.vc_inputs)
        st.dataframe(frame.map(format_compact), use_container_width=True)

    with cost_tab:
        c = session.cost_to_duplicate_inputs
        updated = replace(
            c,
            labor_cost=st.number_input("R&D / Engineering Salaries", 0.0, value=float(c.labor_cost)),
            ip_cost=st.number_input("IP / Patents", 0.0, value=float(c.ip_cost)),
            equipment_cost=st.number_input("Equipment", 0.0, value=float(c.equipment_cost)),
            opportunity_cost_percent=st.slider("Opportunity Cost", 0.0, 1.0, float(c.opportunity_cost_percent), 0.05),
        )
        if updated != c:
            session.set_cost_to_duplicate_inputs(updated)
        metric_card("Cost to Duplicate", session.cost_to_duplicate_valuation)


def render_triangulation(session):
    st.markdown("# 📊 Valuation Triangulation")
    summary = session.triangulation()
    values = summary.method_values()

    fig = go.Figure(go.Bar(
        x=list(values.keys()),
        y=list(values.values()),
        marker_color=["#94A3B8" if name == "Cost Base" else "#3B82F6" for name in values],
    ))
    fig.add_hline(y=summary.average, line_dash="dash", line_color="#EF4444", annotation_text="Avg")
    fig.update_layout(yaxis_title="USD", height=400)
    st.plotly_chart(fig, use_container_width=True)

    col1, col2, col3 = st.columns(3)
    with col1:
        metric_card("Range Low", summary.low)
    with col2:
        metric_card("Range High", summary.high)
    with col3:
        metric_card("Average (adjusted)", summary.adjusted_average)

    st.table(pd.DataFrame({
        "Signal": ["Floor (Cost)", "Market (Scorecard)", "Ceiling (VC)", "Gut Check"],
        "Value": [format_currency(v) for v in (
            summary.floor, summary.scorecard, summary.vc_method, summary.gut_check_adjustment)],
    }))


def render_gut_check(session):
    st.markdown("# 🧠 The Founder's Gut Check")
    narrative = st.text_area("Your context & intuition", height=200)
    if st.button("Analyze & Adjust Valuation", disabled=not narrative.strip()):
        with st.spinner("Analyzing..."):
            run_gut_check(session, get_gateway(), narrative)

    result = session.gut_check
    if result:
        st.markdown(f"> {result.reasoning}")
        metric_card(f"Valuation Adjustment (conviction {result.conviction_score:.0f})", result.suggested_adjustment)


def render_copilot(chat):
    st.markdown("# 💬 Valuation Copilot")
    if not get_gateway().available:
        st.warning("No AI key configured: commands work, open questions will get an apology.")

    for message in chat.messages:
        with st.chat_message(message.role):
            st.markdown(message.content)
            sources = message.sources()
            if sources:
                st.caption("Sources: " + " · ".join(f"[{title}]({uri})" for uri, title in sources))

    prompt = st.chat_input("Ask a question or give a command")
    if prompt:
        request = chat.send(prompt)
        if request is not None:
            with st.spinner("Thinking..."):
                reply = get_gateway().ask(request.message, request.context)
            chat.resolve(request, reply)
        st.rerun()


def render_footer():
    st.markdown("""
    <hr style='margin: 2rem 0;'>
    <div style='padding: 1rem; text-align: center; font-size: 0.8rem; color: #64748B;'>
        Valuation Copilot | Powered by Google Gemini
    </div>
    """, unsafe_allow_html=True)


def main():
    init_state()
    session = st.session_state.session
    page = render_sidebar(session)

    if "Methods" in page:
        render_methods(session)
    elif "Triangulation" in page:
        render_triangulation(session)
    elif "Gut Check" in page:
        render_gut_check(session)
    elif "Copilot" in page:
        render_copilot(st.session_state.chat)


# Main execution
if __name__ == "__main__":
    try:
        main()
        render_footer()
    except Exception as e:
        logger.exception("Unhandled error in the Streamlit page")
        st.error(f"An unexpected error occurred: {str(e)}")
