from fetchrace.cli import main

main()
