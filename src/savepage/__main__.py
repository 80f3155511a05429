from savepage.cli.app import main

main()
