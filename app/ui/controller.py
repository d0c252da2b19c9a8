# app/ui/controller.py

import re
import time
from dataclasses import dataclass
from app.services import api as users_api


NOTICE_SECONDS = 5

_MARKDOWN_SPECIAL = re.compile(r"([\\`*_{}\[\]()#+\-.!|<>~$])")


def escape_markdown(text) -> str:
    """
    Backslash-escapes Markdown/HTML control characters so user-supplied
    text renders literally inside st.markdown, st.success, st.error etc.
    """
    return _MARKDOWN_SPECIAL.sub(r"\\\1", str(text))


@dataclass
class Notice:
    kind: str  # "success" or "error"
    text: str
    expires_at: float


def _empty_form():
    return {"username": "", "email": "", "password": ""}


class UserViewController:
    """
    Holds the state behind the user management page: the loaded user list,
    the create/edit form and the current notice. One instance lives in
    st.session_state for the lifetime of a browser session.
    """

    def __init__(self, api=users_api, clock=time.monotonic):
        self.api = api
        self.clock = clock
        self.users = []
        self.editing_id = None
        self.form = _empty_form()
        # Widget keys include this, so bumping it resets the form inputs
        self.form_version = 0
        self.notice = None

    # -------------------------------
    # Notices
    # -------------------------------

    def notify(self, kind, text):
        self.notice = Notice(kind=kind, text=text, expires_at=self.clock() + NOTICE_SECONDS)

    def current_notice(self, now=None):
        """The active notice, or None once it has been up for NOTICE_SECONDS."""
        if now is None:
            now = self.clock()
        if self.notice and now >= self.notice.expires_at:
            self.notice = None
        return self.notice

    def _notify_failure(self, res):
        text = res.get("message") or "Request failed"
        if res.get("error"):
            text = f"{text}: {res['error']}"
        self.notify("error", text)

    # -------------------------------
    # Form state
    # -------------------------------

    @property
    def is_editing(self):
        return self.editing_id is not None

    def start_edit(self, user):
        self.editing_id = user["id"]
        self.form = {"username": user["username"], "email": user["email"], "password": ""}
        self.form_version += 1

    def reset_form(self):
        self.editing_id = None
        self.form = _empty_form()
        self.form_version += 1

    cancel_edit = reset_form

    # -------------------------------
    # Requests
    # -------------------------------

    def refresh(self):
        res = self.api.list_users()
        if not res.get("success"):
            self._notify_failure(res)
            return False
        self.users = res.get("data") or []
        return True

    def submit(self, username, email, password):
        """
        Creates a user, or updates the one being edited. A blank password
        while editing means "keep the current one". On failure the typed
        values stay in the form.
        """
        self.form = {"username": username, "email": email, "password": password}

        if self.is_editing:
            res = self.api.update_user(self.editing_id, username, email, password or None)
        else:
            res = self.api.create_user(username, email, password)

        if not res.get("success"):
            self._notify_failure(res)
            return False

        self.notify("success", res.get("message") or "Saved")
        self.reset_form()
        self.refresh()
        return True

    def delete(self, user_id):
        res = self.api.delete_user(user_id)
        if not res.get("success"):
            self._notify_failure(res)
            return False

        self.notify("success", res.get("message") or "Deleted")
        if self.editing_id == user_id:
            self.reset_form()
        self.refresh()
        return True
