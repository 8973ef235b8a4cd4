from check_gate.cli import main

main()
