from errsim.cli import main

main()
