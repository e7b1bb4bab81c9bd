from relaudit.cli.app import main

main()
