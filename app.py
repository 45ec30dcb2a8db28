"""
Krishi AI - Streamlit Web UI
Crop advice, mandi prices, disease detection and schemes for farmers.
"""

import asyncio
import sys

# Fix Windows Unicode encoding for Devanagari / emoji in print() statements
if sys.stdout and hasattr(sys.stdout, 'reconfigure'):
    sys.stdout.reconfigure(encoding='utf-8', errors='replace')
if sys.stderr and hasattr(sys.stderr, 'reconfigure'):
    sys.stderr.reconfigure(encoding='utf-8', errors='replace')

import pandas as pd
import pydeck as pdk
import streamlit as st

from krishi import routes
from krishi.analysis import (
    FORM_PREVIOUS_CROPS,
    FORM_SOIL_TYPES,
    SEVERITY_LABELS,
    CropForm,
    CropRecommender,
    DiseaseDetector,
)
from krishi.auth import AuthService
from krishi.backend import BackendClient
from krishi.dashboard import build_dashboard
from krishi.errors import AnalysisError
from krishi.market import (
    MARKET_PRICES,
    filter_prices,
    format_change,
    refresh_prices,
    trend_label,
    unique_markets,
    unique_states,
)
from krishi.messages import bilingual
from krishi.profile import (
    IRRIGATION_TYPES,
    LANGUAGES,
    NUTRIENT_LEVELS,
    SOIL_TYPES,
    FarmData,
    Profile,
    ProfileManager,
    add_previous_crop,
    apply_location,
    remove_previous_crop,
)
from krishi.schemes import CATEGORIES, SCHEMES, STATUS_LABELS, category_icon, category_name, filter_schemes
from krishi.weather import WeatherService

# --- Page Config ---
st.set_page_config(
    page_title="कृषि AI | Krishi AI",
    page_icon="🌾",
    layout="wide",
    initial_sidebar_state="expanded",
)

# --- Custom CSS ---
st.markdown("""
<style>
    .main-header { font-size: 2.2rem; font-weight: 700; color: #2e7d32; }
    .sub-header  { font-size: 1rem; color: #666; margin-bottom: 1.5rem; }
    div[data-testid="stSidebar"] {
        background: linear-gradient(180deg, #1b5e20, #2e7d32);
    }
    div[data-testid="stSidebar"] .stMarkdown { color: white; }
    div[data-testid="stSidebar"] label { color: white !important; }
</style>
""", unsafe_allow_html=True)


# --- Initialize Services (cached) ---
@st.cache_resource
def init_backend():
    return BackendClient()

@st.cache_resource
def init_auth():
    return AuthService(db=init_backend().db)

@st.cache_resource
def init_weather():
    return WeatherService()


backend     = init_backend()
auth        = init_auth()
profiles    = ProfileManager(backend)
weather     = init_weather()
detector    = DiseaseDetector()
recommender = CropRecommender()


# --- Helpers ---
def header(title, subtitle):
    st.markdown(f'<p class="main-header">{title}</p>', unsafe_allow_html=True)
    st.markdown(f'<p class="sub-header">{subtitle}</p>', unsafe_allow_html=True)

def show_notice(notice):
    if notice is None:
        return
    (st.success if notice.success else st.error)(notice.message)

def current_session():
    return auth.get_session(st.session_state.get("token"))

def add_crop_from_input():
    # runs before the rerun, while the input can still be reset
    state = st.session_state["profile_state"]
    state["farm"] = add_previous_crop(state["farm"], st.session_state.get("new_crop", ""))
    st.session_state["new_crop"] = ""


# --- Route guard (runs before the nav widget is drawn) ---
# nav can only be written before the radio exists, so later screens queue a jump in "goto"
session = current_session()
requested = st.session_state.pop("goto", None) or st.session_state.get("nav", routes.HOME)
redirect = routes.resolve_redirect(requested, session is not None)
if redirect == routes.AUTH:
    st.session_state["flash"] = bilingual("login_required")
st.session_state["nav"] = redirect or requested


# --- Sidebar ---
with st.sidebar:
    st.markdown("## 🌾 कृषि AI")
    st.markdown("*Krishi AI*")
    st.markdown("---")

    page = st.radio(
        "Navigate",
        list(routes.ROUTES),
        format_func=lambda p: routes.ROUTES[p],
        key="nav",
        label_visibility="collapsed",
    )

    st.markdown("---")
    if session:
        st.markdown(f"**👤 {session.display_name}**")
        if st.button("लॉग आउट / Log out"):
            auth.sign_out(session.access_token)
            st.session_state.pop("token", None)
            st.session_state.pop("profile_state", None)
            st.session_state["goto"] = routes.HOME
            st.rerun()
    st.markdown(f"**🗄️ Backend:** {backend.mode}")

flash = st.session_state.pop("flash", None)
if flash:
    st.info(flash)


# =====================================================
# PAGE: Landing
# =====================================================
if page == routes.HOME:
    header("🌾 कृषि AI", "AI-Powered Crop Recommendations for every farmer")
    c1, c2, c3 = st.columns(3)
    with c1:
        st.markdown("### 🌱 फसल सुझाव\nCrop advice for your soil and season")
    with c2:
        st.markdown("### 📈 बाजार मूल्य\nToday's mandi rates")
    with c3:
        st.markdown("### 🏛️ सरकारी योजनाएं\nSchemes you can apply for")
    st.info("शुरू करने के लिए लॉग इन करें / Sign in from the sidebar to get started")


# =====================================================
# PAGE: Auth
# =====================================================
elif page == routes.AUTH:
    header("किसान पोर्टल / Farmer Portal",
           "अपने खेत के लिए AI सुझाव पाएं / Get AI recommendations for your farm")

    tab_in, tab_up = st.tabs(["लॉग इन / Sign In", "पंजीकरण / Sign Up"])

    with tab_in:
        with st.form("signin_form"):
            email = st.text_input("ईमेल / Email")
            password = st.text_input("पासवर्ड / Password", type="password")
            submitted = st.form_submit_button("लॉग इन / Sign In", type="primary")
        if submitted:
            with st.spinner("लॉग इन हो रहा है... / Signing in..."):
                result = auth.sign_in(email, password)
            if result.ok:
                st.session_state["token"] = result.session.access_token
                st.session_state["flash"] = bilingual("welcome")
                st.session_state["goto"] = routes.DASHBOARD
                st.rerun()
            else:
                st.error(f"{bilingual('signin_error')}: {result.error}")

    with tab_up:
        with st.form("signup_form"):
            name = st.text_input("नाम / Name")
            phone = st.text_input("फोन नंबर / Phone Number", placeholder="+91 98765 43210")
            email = st.text_input("ईमेल / Email", key="signup_email")
            password = st.text_input("पासवर्ड / Password", type="password", key="signup_password")
            submitted = st.form_submit_button("पंजीकरण / Sign Up", type="primary")
        if submitted:
            result = auth.sign_up(email, password, name, phone)
            if not result.ok:
                st.error(f"{bilingual('signup_error')}: {result.error}")
            elif result.confirmation_pending:
                st.success(f"{bilingual('signup_done')} {bilingual('signup_pending')}")
            else:
                st.success(f"{bilingual('signup_done')} लॉग इन करें / Please sign in")


# =====================================================
# PAGE: Dashboard
# =====================================================
elif page == routes.DASHBOARD:
    farm = profiles.load(session.user_id, session.access_token).farm
    data = build_dashboard(session, weather, farm.latitude, farm.longitude)

    header(f"🌾 {data['greeting']}", data["time_greeting"])

    st.subheader("☁️ मौसम अपडेट / Weather Update")
    w = data["weather"]
    w1, w2, w3, w4 = st.columns(4)
    with w1:
        st.metric("तापमान", f"{w['temperature']}°C")
    with w2:
        st.metric("नमी", f"{w['humidity']}%")
    with w3:
        st.metric("हवा km/h", w["wind_speed"])
    with w4:
        st.metric("स्थिति", w["condition"])
    st.caption(f"📢 {w['forecast']}")

    st.markdown("---")
    st.subheader("🟤 मिट्टी स्वास्थ्य / Soil Health")
    soil = data["soil"]
    s1, s2, s3, s4, s5 = st.columns(5)
    s1.metric("pH Level", soil["ph"])
    s2.metric("नाइट्रोजन", soil["nitrogen"])
    s3.metric("फास्फोरस", soil["phosphorus"])
    s4.metric("पोटेशियम", soil["potassium"])
    s5.metric("नमी", f"{soil['moisture']}%")

    st.markdown("---")
    st.subheader("🌱 AI फसल सुझाव / AI Crop Recommendation")
    rec = data["recommendation"]
    st.markdown(f"### {rec['emoji']} {rec['title']}")
    st.caption(f"{rec['expected_yield']} | {rec['profit_margin']} | {rec['sustainability']}")

    st.markdown("---")
    tiles = st.columns(len(data["menu"]))
    for col, item in zip(tiles, data["menu"]):
        with col:
            st.markdown(f"### {item['icon']}\n{item['title']}")

    st.markdown("---")
    m1, m2 = st.columns([2, 1])
    with m1:
        st.info(f"🧑‍🌾 {data['mascot']['quote']}")
    with m2:
        ach = data["achievements"]
        st.markdown(f"**🏆 {ach['unlocked']}/{ach['total']}**")
        for badge in ach["badges"]:
            st.markdown(f"{badge['badge']} {badge['title_hindi']} / {badge['title']}")
            if badge["progress_percent"] is not None:
                st.progress(badge["progress_percent"] / 100)


# =====================================================
# PAGE: Profile
# =====================================================
elif page == "/profile":
    header("किसान प्रोफाइल / Farmer Profile", "अपनी जानकारी अपडेट करें / Update your information")

    # edits live in session state until the matching save button is pressed
    state = st.session_state.get("profile_state")
    if not state or state["user_id"] != session.user_id:
        records = profiles.load(session.user_id, session.access_token)
        show_notice(records.notice)
        state = {"user_id": session.user_id, "profile": records.profile, "farm": records.farm}
        st.session_state["profile_state"] = state

    profile: Profile = state["profile"]
    farm: FarmData = state["farm"]

    st.subheader("👤 व्यक्तिगत जानकारी / Personal Information")
    with st.form("profile_form"):
        p1, p2 = st.columns(2)
        with p1:
            name = st.text_input("नाम / Name *", value=profile.name)
            location = st.text_input("स्थान / Location", value=profile.location,
                                     placeholder="गांव, जिला, राज्य / Village, District, State")
            land_size = st.number_input("जमीन का आकार / Land Size (एकड़ / Acres)",
                                        value=float(profile.land_size), step=0.1)
        with p2:
            phone = st.text_input("फोन नंबर / Phone Number", value=profile.phone_number)
            language = st.selectbox(
                "भाषा वरीयता / Language Preference", list(LANGUAGES),
                index=list(LANGUAGES).index(profile.language_preference)
                if profile.language_preference in LANGUAGES else 0,
                format_func=LANGUAGES.get,
            )
            irrigation_opts = [""] + list(IRRIGATION_TYPES)
            irrigation = st.selectbox(
                "सिंचाई प्रकार / Irrigation Type", irrigation_opts,
                index=irrigation_opts.index(profile.irrigation_type)
                if profile.irrigation_type in irrigation_opts else 0,
                format_func=lambda v: IRRIGATION_TYPES.get(v, "सिंचाई चुनें / Select irrigation"),
            )
        save_profile = st.form_submit_button("प्रोफाइल सेव करें / Save Profile", type="primary")

    if save_profile:
        profile = Profile(name=name, phone_number=phone, land_size=land_size, location=location,
                          irrigation_type=irrigation, language_preference=language)
        state["profile"] = profile
        with st.spinner("सेव हो रहा है... / Saving..."):
            show_notice(profiles.save_profile(session.user_id, profile, session.access_token))

    st.markdown("---")
    st.subheader("💧 खेत की जानकारी / Farm Information")
    with st.form("farm_form"):
        f1, f2 = st.columns(2)
        soil_opts = [""] + list(SOIL_TYPES)
        with f1:
            soil_type = st.selectbox(
                "मिट्टी का प्रकार / Soil Type", soil_opts,
                index=soil_opts.index(farm.soil_type) if farm.soil_type in soil_opts else 0,
                format_func=lambda v: SOIL_TYPES.get(v, "मिट्टी चुनें / Select soil"),
            )
        with f2:
            ph_level = st.number_input("pH स्तर / pH Level", value=float(farm.ph_level), step=0.1)

        levels = list(NUTRIENT_LEVELS)
        n1, n2, n3 = st.columns(3)
        with n1:
            nitrogen = st.selectbox("नाइट्रोजन स्तर / Nitrogen Level", levels,
                                    index=levels.index(farm.nitrogen_level)
                                    if farm.nitrogen_level in levels else 1,
                                    format_func=NUTRIENT_LEVELS.get)
        with n2:
            phosphorus = st.selectbox("फास्फोरस स्तर / Phosphorus Level", levels,
                                      index=levels.index(farm.phosphorus_level)
                                      if farm.phosphorus_level in levels else 1,
                                      format_func=NUTRIENT_LEVELS.get)
        with n3:
            potassium = st.selectbox("पोटेशियम स्तर / Potassium Level", levels,
                                     index=levels.index(farm.potassium_level)
                                     if farm.potassium_level in levels else 1,
                                     format_func=NUTRIENT_LEVELS.get)
        organic = st.number_input("जैविक पदार्थ / Organic Matter (%)",
                                  value=float(farm.organic_matter), step=0.1)
        save_farm = st.form_submit_button("खेत का डेटा सेव करें / Save Farm Data", type="primary")

    # previous crops and location are edited outside the form
    st.markdown("**पिछली फसलें / Previous Crops**")
    c_in, c_btn = st.columns([3, 1])
    with c_in:
        st.text_input("फसल का नाम / Crop name", key="new_crop",
                      label_visibility="collapsed")
    with c_btn:
        st.button("जोड़ें / Add", on_click=add_crop_from_input)
    if farm.previous_crops:
        chips = st.columns(min(len(farm.previous_crops), 6))
        for i, crop in enumerate(list(farm.previous_crops)):
            with chips[i % len(chips)]:
                if st.button(f"{crop} ✕", key=f"crop_{i}"):
                    state["farm"] = remove_previous_crop(farm, crop)
                    st.rerun()

    st.markdown("**📍 स्थान / Farm Location**")
    l1, l2, l3 = st.columns([2, 2, 1])
    with l1:
        lat_in = st.number_input("Latitude", value=float(farm.latitude), format="%.6f")
    with l2:
        lon_in = st.number_input("Longitude", value=float(farm.longitude), format="%.6f")
    with l3:
        if st.button("📍 Set"):
            farm, notice = apply_location(farm, lat_in, lon_in)
            state["farm"] = farm
            show_notice(notice)

    if save_farm:
        farm = farm.model_copy(update={
            "soil_type": soil_type, "ph_level": ph_level, "nitrogen_level": nitrogen,
            "phosphorus_level": phosphorus, "potassium_level": potassium,
            "organic_matter": organic,
        })
        state["farm"] = farm
        with st.spinner("सेव हो रहा है... / Saving..."):
            show_notice(profiles.save_farm_data(session.user_id, farm, session.access_token))

    if farm.latitude or farm.longitude:
        st.pydeck_chart(pdk.Deck(
            layers=[pdk.Layer(
                "ScatterplotLayer",
                data=[{"lat": farm.latitude, "lon": farm.longitude}],
                get_position="[lon, lat]",
                get_fill_color=[46, 125, 50, 200],
                get_radius=60,
            )],
            initial_view_state=pdk.ViewState(
                latitude=farm.latitude, longitude=farm.longitude, zoom=13, pitch=0,
            ),
        ))


# =====================================================
# PAGE: Market Prices
# =====================================================
elif page == "/market-prices":
    header("बाजार मूल्य / Market Prices", "आज के ताजे भाव देखें / Check today's fresh rates")

    prices = st.session_state.get("prices", list(MARKET_PRICES))

    f1, f2, f3, f4 = st.columns(4)
    with f1:
        search = st.text_input("फसल खोजें / Search crops...", key="price_search")
    with f2:
        market = st.selectbox("मंडी / Market", ["all"] + unique_markets(prices),
                              format_func=lambda m: "सभी मंडी / All Markets" if m == "all" else m)
    with f3:
        state_sel = st.selectbox("राज्य / State", ["all"] + unique_states(prices),
                                 format_func=lambda s: "सभी राज्य / All States" if s == "all" else s)
    with f4:
        st.markdown("<br>", unsafe_allow_html=True)
        if st.button("रिफ्रेश / Refresh"):
            with st.spinner("अपडेट हो रहा है... / Updating..."):
                prices = refresh_prices(prices)
            st.session_state["prices"] = prices

    filtered = filter_prices(prices, search=search, market=market, state=state_sel)

    if not filtered:
        st.warning(f"{bilingual('no_prices')} - {bilingual('change_filters')}")
    else:
        rows = []
        for p in filtered:
            rows.append({
                "Crop":        f"{p['crop']} / {p['hindi_name']}",
                "Market":      f"{p['market']}, {p['state']}",
                "Modal ₹":     f"{p['modal_price']:,.0f}",
                "Min ₹":       f"{p['min_price']:,}",
                "Max ₹":       f"{p['max_price']:,}",
                "Change":      format_change(p["change_percent"]),
                "Trend":       trend_label(p["trend"]),
                "Updated":     p["arrival_date"],
            })
        st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)


# =====================================================
# PAGE: Disease Detection
# =====================================================
elif page == "/disease-detection":
    header("रोग पहचान / Disease Detection", "पौधे की फोटो खींचें और AI से बीमारी की पहचान करें")
    st.info("बेहतर परिणामों के लिए: स्पष्ट रोशनी में पत्तियों या पौधे की नजदीकी फोटो खींचें। "
            "/ For better results: Take close-up photos of leaves or plants in clear lighting.")

    photo = st.camera_input("कैमरा से फोटो / Take Photo")
    upload = st.file_uploader("गैलरी से चुनें / Upload from gallery", type=["jpg", "jpeg", "png"])
    image = photo or upload
    if image:
        st.image(image, width=320)

    if st.button("🔬 विश्लेषण करें / Analyze", type="primary"):
        try:
            with st.spinner("विश्लेषण हो रहा है... / Analyzing..."):
                outcome = asyncio.run(detector.analyze(
                    image.getvalue() if image else None,
                    filename=getattr(image, "name", "leaf.jpg") if image else "leaf.jpg",
                ))
        except AnalysisError as e:
            st.error(str(e))
        else:
            st.success(outcome["message"])
            if outcome["notice"]:
                st.warning(outcome["notice"])
            for r in outcome["results"]:
                st.markdown(f"### {r.get('hindi_name', '')} / {r.get('disease_name', '')}")
                st.caption(f"गंभीरता / Severity: {SEVERITY_LABELS.get(r.get('severity'), r.get('severity'))}"
                           f" | विश्वसनीयता / Confidence: {r.get('confidence')}%")
                d1, d2 = st.columns(2)
                with d1:
                    st.markdown("**लक्षण / Symptoms**")
                    for s in r.get("symptoms", []):
                        st.markdown(f"- {s}")
                    st.markdown("**उपचार / Treatment**")
                    for s in r.get("treatment", []):
                        st.markdown(f"- {s}")
                with d2:
                    st.markdown("**रोकथाम / Prevention**")
                    for s in r.get("prevention", []):
                        st.markdown(f"- {s}")
                    st.markdown("**जैविक उपचार / Organic Remedy**")
                    for s in r.get("organic_remedy", []):
                        st.markdown(f"- {s}")


# =====================================================
# PAGE: Government Schemes
# =====================================================
elif page == "/government-schemes":
    header("सरकारी योजनाएं / Government Schemes", "किसानों के लिए योजनाएं / Schemes for farmers")

    g1, g2 = st.columns([3, 1])
    with g1:
        search = st.text_input("योजना खोजें / Search schemes...", key="scheme_search")
    with g2:
        category = st.selectbox("श्रेणी / Category", ["all"] + list(CATEGORIES),
                                format_func=lambda c: "सभी श्रेणी / All Categories"
                                if c == "all" else category_name(c))

    filtered = filter_schemes(SCHEMES, search=search, category=category)
    st.caption(f"कुल योजनाएं: {len(filtered)}")

    if not filtered:
        st.warning(f"{bilingual('no_schemes')} - {bilingual('change_filters')}")

    for scheme in filtered:
        with st.expander(f"{category_icon(scheme['category'])} {scheme['hindi_name']} / {scheme['name']}"):
            st.markdown(f"**{scheme['hindi_description']}**")
            st.markdown(scheme["description"])
            st.caption(f"{category_name(scheme['category'])} | "
                       f"{STATUS_LABELS.get(scheme['status'], scheme['status'])} | "
                       f"💵 {scheme['amount']} | 📅 {scheme['deadline']}")
            e1, e2 = st.columns(2)
            with e1:
                st.markdown("**लाभ / Benefits**")
                for b in scheme["benefits"]:
                    st.markdown(f"- {b}")
                st.markdown("**पात्रता / Eligibility**")
                for b in scheme["eligibility"]:
                    st.markdown(f"- {b}")
            with e2:
                st.markdown("**आवश्यक दस्तावेज / Documents Required**")
                for b in scheme["documents_required"]:
                    st.markdown(f"- {b}")
                st.markdown("**आवेदन प्रक्रिया / Application Process**")
                for i, step in enumerate(scheme["application_process"], 1):
                    st.markdown(f"{i}. {step}")
            st.markdown(f"📞 {scheme['contact_info']} | [🔗 Website]({scheme['website_url']})")


# =====================================================
# PAGE: Crop Recommendation
# =====================================================
elif page == "/crop-recommendation":
    header("फसल सुझाव / Crop Recommendation",
           "Enter your farm details and get AI-powered crop recommendations")

    with st.form("crop_form"):
        location = st.text_input("Location (District/State)", placeholder="e.g., Ranchi, Jharkhand")
        soil = st.selectbox("Soil Type", [""] + list(FORM_SOIL_TYPES),
                            format_func=lambda v: FORM_SOIL_TYPES.get(v, "Select soil type"))
        size = st.text_input("Farm Size (Hectares)", placeholder="e.g., 2.5")
        budget = st.text_input("Available Budget (₹)", placeholder="e.g., 50000")
        prev = st.selectbox("Previous Crop", [""] + list(FORM_PREVIOUS_CROPS),
                            format_func=lambda v: FORM_PREVIOUS_CROPS.get(v, "Select previous crop"))
        analyze = st.form_submit_button("🌱 Get Recommendations", type="primary")

    if analyze:
        form = CropForm(location=location, soil_type=soil, farm_size=size,
                        budget=budget, previous_crop=prev)
        with st.spinner("Analyzing your farm..."):
            outcome = asyncio.run(recommender.recommend(form))
        if outcome["notice"]:
            st.warning(outcome["notice"])
        for crop in outcome["recommendations"]:
            with st.container():
                r1, r2, r3 = st.columns([3, 2, 2])
                with r1:
                    st.markdown(f"### 🌾 {crop.get('name')}")
                    st.caption(f"📅 {crop.get('season', '')}")
                    st.caption(" · ".join(crop.get("reasons", [])))
                with r2:
                    st.metric("Confidence", f"{crop.get('confidence')}%")
                    st.caption(f"Yield: {crop.get('expected_yield')}")
                with r3:
                    st.metric("Profit", crop.get("profit_margin"))
                    st.caption(f"Sustainability: {crop.get('sustainability_score')}%")
                st.markdown("---")
