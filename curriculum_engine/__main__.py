from curriculum_engine.cli.main import main

main()
