from eltab.cli import main

main()
