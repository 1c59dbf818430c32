from roblox_std.cli import app

app()
