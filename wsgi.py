from glucoguide import create_app

app = create_app()
