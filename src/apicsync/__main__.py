from apicsync.ui.cli import run

run()
