from grains.cli import app

app(prog_name="grains")
