from ui.main_window import run


if __name__ == "__main__":
    """
    Desktop entrypoint; configuration comes from the environment / .env (see config.py).
    """
    run()
