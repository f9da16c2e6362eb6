from nest_scaffold.pipeline import main

main()
