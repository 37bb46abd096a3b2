from mcmonitor.cli import main

main()
