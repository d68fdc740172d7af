from src.app_factory import create_app


if __name__ == "__main__":
    """
    Dedicated entrypoint for the clinic web dashboard.
    CLI: `flask --app src.app_factory:create_app seed` loads demo data,
    `flask --app src.app_factory:create_app db ...` runs migrations.
    """
    app = create_app()
    app.run(host="0.0.0.0", port=5001, debug=True)
