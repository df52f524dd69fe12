# mipsasm/app.py
from flask import Flask, request, jsonify
from flask_cors import CORS
import logging

from mipsasm.mips_assembler import MipsAssembler
from mipsasm.mips_disassembler import MipsDisassembler
from mipsasm.mips_errors import AssemblerError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = {
    "MIPSASM_BASE_ADDRESS": 0,
    "MIPSASM_CORS_ORIGINS": "http://localhost:3000",
}


def create_app(config=None):
    app = Flask(__name__)
    app.config.from_mapping(DEFAULT_CONFIG)
    app.config.from_prefixed_env() # e.g. FLASK_MIPSASM_BASE_ADDRESS=4194304
    if config:
        app.config.from_mapping(config)

    CORS(app, resources={r"/api/*": {"origins": app.config["MIPSASM_CORS_ORIGINS"]}})

    @app.route('/')
    def index():
        return "MIPS Assembler Backend is running!"

    @app.route('/api/ping', methods=['GET'])
    def ping():
        logger.debug("Ping endpoint called")
        return jsonify({"message": "pong"})

    @app.route('/api/assemble', methods=['POST'])
    def handle_assemble():
        data = request.get_json(silent=True)
        if not data or 'assembly' not in data:
            return jsonify({"errors": [{"message": "Missing 'assembly' key in request."}]}), 400
        base_address = data.get('base_address', app.config["MIPSASM_BASE_ADDRESS"])
        if not isinstance(base_address, int):
            return jsonify({"errors": [{"message": "'base_address' must be an integer."}]}), 400
        try:
            # Fresh assembler per request so label/relocation tables are never shared
            assembler = MipsAssembler(base_address=base_address)
        except AssemblerError as e:
            return jsonify({"errors": [{"message": e.message, "kind": e.kind}]}), 400
        try:
            assembly_code = data['assembly']
            logger.debug(f"Received assembly for assembly: {assembly_code[:100]}...")
            result = assembler.assemble(assembly_code)
            if result['errors']:
                logger.warning(f"Assembly failed: {result['errors']}")
            else:
                logger.debug(f"Assembly successful. Code length: {len(result['machine_code'])}")
            return jsonify(result)
        except Exception as e:
            logger.error(f"Error during assembly: {e}", exc_info=True)
            return jsonify({"errors": [{"message": f"Internal server error during assembly: {e}"}]}), 500

    @app.route('/api/disassemble', methods=['POST'])
    def handle_disassemble():
        data = request.get_json(silent=True)
        if (not data or not isinstance(data.get('machine_code'), list)
                or not all(isinstance(item, str) for item in data['machine_code'])):
            return jsonify({"errors": [{"message": "Missing/invalid 'machine_code' key (must be list of hex strings)."}]}), 400
        try:
            disassembler = MipsDisassembler(base_address=app.config["MIPSASM_BASE_ADDRESS"])
            result = disassembler.disassemble(data['machine_code'])
            logger.debug(f"Disassembly result: {result['assembly_code'][:100]}...")
            return jsonify(result)
        except Exception as e:
            logger.error(f"Error during disassembly: {e}", exc_info=True)
            return jsonify({"errors": [{"message": f"Internal server error during disassembly: {e}"}]}), 500

    return app


if __name__ == '__main__':
    # Or: flask --app mipsasm.app:create_app run --port 5001
    create_app().run(debug=False, port=5001)
