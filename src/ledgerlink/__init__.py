# Import main lazily so importing the domain layer doesn't pull in click
def __getattr__(name):
    if name == "main":
        from ledgerlink.cli.main import main
        return main
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")
