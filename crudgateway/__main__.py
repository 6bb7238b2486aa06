from crudgateway.main import run

run()
