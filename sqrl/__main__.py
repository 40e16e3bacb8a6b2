from sqrl.cli.app import main

main()
