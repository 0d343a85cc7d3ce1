from __future__ import annotations

import logging
from datetime import timedelta

from flask import Flask, flash, redirect, render_template, request, session, url_for

from ..common.web import (
    admin_required,
    current_role,
    current_user_id,
    json_api,
    json_ok,
    login_required,
    request_data,
)
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.enums import MembershipFeeStatus, Role, UserStatus
from ..core.exceptions import AuthenticationError, DomainError, ValidationError
from ..container import Container

logger = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    app.jinja_env.globals["csrf_token"] = lambda: ""

    @app.route("/", methods=["GET", "POST"], endpoint="login")
    def login():
        if "user_id" in session:
            return redirect(url_for("dashboard"))

        if request.method == "POST":
            email = request.form.get("email", "")
            password = request.form.get("password", "")
            remember = request.form.get("remember_me")

            try:
                s_user = container.auth_service.authenticate(email, password)

                session.permanent = bool(remember)
                app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

                session["user_id"] = s_user.user_id
                session["name"] = s_user.name
                session["role"] = s_user.role.value

                flash("Signed in successfully", "success")
                return redirect(url_for("dashboard"))
            except AuthenticationError as e:
                flash(str(e), "danger")
            except Exception as e:
                logger.exception("Login failed")
                if bool(app.config.get("DEBUG", False)):
                    flash(f"System error while signing in: {e}", "danger")
                else:
                    flash("System error while signing in", "danger")

        return render_template("login.html")

    @app.route("/signup", methods=["GET", "POST"], endpoint="signup")
    def signup():
        if request.method == "POST":
            try:
                container.auth_service.signup(
                    name=request.form.get("name", ""),
                    email=request.form.get("email", ""),
                    password=request.form.get("password", ""),
                )
                flash("Account created. An admin will review your request shortly.", "success")
                return redirect(url_for("login"))
            except ValidationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Signup failed")
                flash("System error while creating your account", "danger")

        return render_template("signup.html")

    @app.route("/forgot-password", methods=["GET", "POST"], endpoint="forgot_password")
    def forgot_password():
        if request.method == "POST":
            try:
                container.auth_service.request_password_reset(
                    request.form.get("email", ""),
                    base_url=container.settings.get("PORTAL_BASE_URL") or request.host_url,
                )
                flash("If an account exists for that email, a reset link is on its way.", "info")
                return redirect(url_for("login"))
            except ValidationError as e:
                flash(str(e), "danger")
            except Exception:
                logger.exception("Password reset request failed")
                flash("System error while sending the reset link", "danger")

        return render_template("forgot_password.html")

    @app.route("/reset-password/<token>", methods=["GET", "POST"], endpoint="reset_password")
    def reset_password(token: str):
        try:
            container.auth_service.user_for_reset_token(token)
        except ValidationError as e:
            flash(str(e), "danger")
            return redirect(url_for("forgot_password"))

        if request.method == "POST":
            password = request.form.get("password", "")
            try:
                if password != request.form.get("confirm_password", ""):
                    raise ValidationError("Passwords do not match")
                container.auth_service.reset_password(token, password)
                flash("Password updated. Please sign in.", "success")
                return redirect(url_for("login"))
            except ValidationError as e:
                flash(str(e), "danger")

        return render_template("reset_password.html", token=token)

    @app.route("/logout", endpoint="logout")
    def logout():
        session.clear()
        flash("Signed out.", "info")
        return redirect(url_for("login"))

    @app.route("/profile", methods=["GET", "POST"], endpoint="profile")
    @login_required
    def profile():
        user_id = current_user_id()
        if request.method == "POST":
            try:
                updated = container.user_service.update_own_profile(
                    user_id=user_id,
                    name=request.form.get("name", ""),
                    nic=request.form.get("nic"),
                    date_of_birth=request.form.get("date_of_birth"),
                    gender=request.form.get("gender"),
                    mobile_number=request.form.get("mobile_number"),
                )
                session["name"] = updated.name
                flash("Profile updated", "success")
                return redirect(url_for("profile"))
            except DomainError as e:
                flash(str(e), "danger")

        user = container.user_service.get(user_id)
        badges = container.points_service.badges_for(user)
        return render_template("profile.html", user=user, badges=badges, active_page="profile")

    @app.route("/admin/users", endpoint="admin_users")
    @admin_required
    def admin_users():
        status_s = request.args.get("status")
        status = UserStatus(status_s) if status_s in {s.value for s in UserStatus} else None
        users = container.user_service.list_users(status=status)
        return render_template("admin/users.html", users=users, status=status_s, active_page="admin_users")

    @app.route("/admin/users/<int:user_id>/approve", methods=["POST"], endpoint="approve_user")
    @admin_required
    def approve_user(user_id: int):
        try:
            container.user_service.approve(current_role=current_role(), user_id=user_id)
            flash("Member approved", "success")
        except DomainError as e:
            flash(str(e), "danger")
        return redirect(url_for("admin_users", status="pending"))

    @app.route("/admin/users/<int:user_id>/reject", methods=["POST"], endpoint="reject_user")
    @admin_required
    def reject_user(user_id: int):
        try:
            container.user_service.reject(current_role=current_role(), user_id=user_id)
            flash("Request declined and removed", "info")
        except DomainError as e:
            flash(str(e), "danger")
        return redirect(url_for("admin_users", status="pending"))

    @app.route("/admin/users/<int:user_id>/delete", methods=["POST"], endpoint="delete_user")
    @admin_required
    def delete_user(user_id: int):
        try:
            container.user_service.delete(current_role=current_role(), user_id=user_id)
            flash("Member removed", "success")
        except DomainError as e:
            flash(str(e), "danger")
        return redirect(url_for("admin_users"))

    @app.route("/api/users", methods=["GET"], endpoint="api_users")
    @admin_required
    @json_api
    def api_users():
        return json_ok([u.to_dict() for u in container.user_service.list_users()])

    @app.route("/api/users/<int:user_id>", methods=["PUT"], endpoint="api_update_user")
    @admin_required
    @json_api
    def api_update_user(user_id: int):
        data = request_data()
        try:
            role = Role(data.get("role", Role.MEMBER.value))
        except ValueError:
            raise ValidationError("Unknown role")
        updated = container.user_service.update_member(
            current_role=current_role(),
            user_id=user_id,
            name=data.get("name", ""),
            role=role,
            designation=data.get("designation"),
        )
        return json_ok(updated.to_dict())

    @app.route("/api/users/<int:user_id>/fee-status", methods=["POST"], endpoint="api_fee_status")
    @admin_required
    @json_api
    def api_fee_status(user_id: int):
        try:
            status = MembershipFeeStatus(request_data().get("status", ""))
        except ValueError:
            raise ValidationError("Fee status must be 'pending' or 'paid'")
        container.user_service.set_fee_status(current_role=current_role(), user_id=user_id, status=status)
        return json_ok(message="Fee status updated")

    @app.route("/api/me/push-token", methods=["POST"], endpoint="api_push_token")
    @login_required
    @json_api
    def api_push_token():
        container.user_service.register_push_token(user_id=current_user_id(), token=request_data().get("token", ""))
        return json_ok(message="Notifications enabled")
