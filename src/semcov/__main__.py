from semcov.cli.main import cli

cli()
