from triport.cli import main

main()
