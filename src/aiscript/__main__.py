from aiscript.cli.main import main

main()
