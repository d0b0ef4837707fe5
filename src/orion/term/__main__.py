from orion.term.demo import main

main()
