# app/ui/users.py

import streamlit as st
from app.ui.controller import escape_markdown


def users_page(controller):
    st.title("👥 User Management")

    render_notice(controller)
    render_form(controller)

    st.markdown("### 📋 Users")
    if st.button("🔄 Refresh", key="refresh_users"):
        controller.refresh()
        st.rerun()

    render_table(controller)


@st.fragment(run_every=1)
def render_notice(controller):
    """
    Re-runs every second on its own, so a notice disappears once it has
    been shown for five seconds even if the user does nothing.
    """
    notice = controller.current_notice()
    if notice is None:
        return
    if notice.kind == "success":
        st.success(f"✅ {escape_markdown(notice.text)}")
    else:
        st.error(f"❌ {escape_markdown(notice.text)}")


def render_form(controller):
    version = controller.form_version

    if controller.is_editing:
        st.subheader("✏️ Edit User")
    else:
        st.subheader("📝 Create User")

    with st.form(f"user_form_{version}"):
        username = st.text_input("Username", value=controller.form["username"], key=f"username_{version}")
        email = st.text_input("Email", value=controller.form["email"], key=f"email_{version}")
        password = st.text_input(
            "Password",
            value=controller.form["password"],
            type="password",
            key=f"password_{version}",
            help="Leave blank to keep the current password" if controller.is_editing else None,
        )
        submitted = st.form_submit_button("💾 Update" if controller.is_editing else "➕ Create")

    if submitted:
        with st.spinner("Saving..."):
            controller.submit(username, email, password)
        st.rerun()

    if controller.is_editing and st.button("← Cancel", key=f"cancel_edit_{version}"):
        controller.cancel_edit()
        st.rerun()


def render_table(controller):
    if not controller.users:
        st.info("No users yet.")
        return

    header = st.columns([3, 4, 3, 1, 1])
    for col, title in zip(header, ["Username", "Email", "Created", "", ""]):
        col.markdown(f"**{title}**")

    for user in controller.users:
        cols = st.columns([3, 4, 3, 1, 1])
        # st.text renders its argument verbatim, no Markdown or HTML
        cols[0].text(user["username"])
        cols[1].text(user["email"])
        cols[2].text(str(user.get("createdAt", ""))[:19].replace("T", " "))
        if cols[3].button("✏️", key=f"edit_{user['id']}"):
            controller.start_edit(user)
            st.rerun()
        if cols[4].button("🗑️", key=f"delete_{user['id']}"):
            controller.delete(user["id"])
            st.rerun()
