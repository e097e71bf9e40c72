from dnschecker.cli import main

main(prog_name="dnschecker")
