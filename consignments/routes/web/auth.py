from flask import Blueprint, flash, redirect, render_template, request, url_for
from flask_login import current_user, login_required, login_user, logout_user

from consignments.errors import AppError
from consignments.extensions import limiter
from consignments.services import AuthService, ReportingService

web_auth_bp = Blueprint("web_auth", __name__)


@web_auth_bp.get("/")
def landing():
    return render_template("index.html", stats=ReportingService.platform_stats())


@web_auth_bp.route("/signup", methods=["GET", "POST"])
@limiter.limit("15 per minute")
def signup():
    if current_user.is_authenticated:
        return redirect(url_for(AuthService.landing_endpoint(current_user)))

    if request.method == "GET":
        return render_template("signup.html")

    try:
        user = AuthService.register_user(
            full_name=request.form.get("full_name", ""),
            email=request.form.get("email", ""),
            password=request.form.get("password", ""),
            role=request.form.get("role", "renter"),
            phone=request.form.get("phone", ""),
            business_name=request.form.get("business_name", ""),
        )
        login_user(user)
        flash("Account created successfully.", "success")
        return redirect(url_for(AuthService.landing_endpoint(user)))
    except AppError as exc:
        flash(exc.message, "error")
        return redirect(url_for("web_auth.signup"))


@web_auth_bp.route("/login", methods=["GET", "POST"])
@limiter.limit("20 per minute")
def login():
    if current_user.is_authenticated:
        return redirect(url_for(AuthService.landing_endpoint(current_user)))

    if request.method == "GET":
        return render_template("login.html")

    try:
        user = AuthService.authenticate_user(
            email=request.form.get("email", ""),
            password=request.form.get("password", ""),
        )
        login_user(user, remember=bool(request.form.get("remember")))
        flash("Welcome back.", "success")
        return redirect(url_for(AuthService.landing_endpoint(user)))
    except AppError as exc:
        flash(exc.message, "error")
        return redirect(url_for("web_auth.login"))


@web_auth_bp.get("/logout")
@login_required
def logout():
    logout_user()
    flash("Logged out successfully.", "success")
    return redirect(url_for("web_auth.landing"))
